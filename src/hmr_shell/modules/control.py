"""
Hot-reload control commands: ``hmr`` and the quick ``reload``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hmr_shell.modules.datamodels import ReloadReport

if TYPE_CHECKING:
    from hmr_shell.core.registry import CommandRegistry
    from hmr_shell.modules.manager import ModuleRegistry

# Owner of the control commands; they survive module reloads
CONTROL_MODULE = "hmr"

HELP_TEXT = """\
Hot reload commands:
  hmr status            - Show hot reload status
  hmr reload [module]   - Reload one module, or all modules
  hmr modules           - List loaded modules
  hmr info <module>     - Show module details
  hmr enable|disable    - Toggle hot reload
  reload [module]       - Quick reload"""


def _yes(flag: bool) -> str:
    return "yes" if flag else "no"


def format_status(manager: "ModuleRegistry") -> str:
    status = manager.status()
    return "\n".join([
        "Hot reload status:",
        f"  Enabled:        {_yes(status.enabled)}",
        f"  Modules:        {status.module_count}",
        f"  Reloading:      {_yes(status.is_reloading)}",
        f"  File watcher:   {'active' if status.watchers_active else 'inactive'}",
    ])


def format_modules(manager: "ModuleRegistry") -> str:
    records = manager.records()
    if not records:
        return "No modules registered"
    lines = ["Loaded modules:"]
    for record in records:
        state = "" if record.state.value == "loaded" else f" [{record.state.value}]"
        lines.append(
            f"  {record.name:<16} v{record.version:<10} {record.reload_count} reloads{state}"
        )
    return "\n".join(lines)


def format_module_info(manager: "ModuleRegistry", name: str) -> str:
    record = manager.get_module_info(name)
    if record is None:
        return f"Module '{name}' not found"
    owned = manager.commands.commands_by_module(name)
    lines = [
        f"Module: {record.name}",
        f"  Version:      {record.version}",
        f"  Source:       {record.source}",
        f"  State:        {record.state.value}",
        f"  Loaded at:    {record.loaded_at:%Y-%m-%d %H:%M:%S}",
        f"  Reloads:      {record.reload_count}",
        f"  Commands:     {', '.join(owned) if owned else '(none)'}",
        f"  Dependencies: {', '.join(record.dependencies) if record.dependencies else '(none)'}",
        f"  Dependents:   {', '.join(record.dependents) if record.dependents else '(none)'}",
    ]
    if record.last_error:
        lines.append(f"  Last error:   {record.last_error}")
    return "\n".join(lines)


def format_report(report: ReloadReport) -> str:
    if report.already_in_progress:
        return "Reload already in progress"
    lines = [
        f"Reloaded {report.succeeded}/{report.total} modules in {report.duration_ms:.0f}ms"
    ]
    if report.failed:
        lines.append(f"{report.failed} modules failed to reload:")
        for outcome in report.results:
            if not outcome.success:
                lines.append(f"  {outcome.name}: {outcome.error}")
    return "\n".join(lines)


def register_hot_reload_commands(manager: "ModuleRegistry", commands: "CommandRegistry") -> None:
    """Register the ``hmr`` and ``reload`` commands for a module registry."""

    async def reload(target: str | None) -> str:
        if target:
            record = await manager.hot_reload_module(target)
            return f"Reloaded module: {target} (v{record.version})"
        return format_report(await manager.hot_reload_all())

    async def cmd_hmr(args: list[str], raw: str) -> str:
        action = args[0].lower() if args else "status"

        if action == "status":
            return format_status(manager)
        if action == "reload":
            return await reload(args[1] if len(args) > 1 else None)
        if action == "enable":
            manager.enable()
            return "Hot reload enabled"
        if action == "disable":
            manager.disable()
            return "Hot reload disabled"
        if action == "modules":
            return format_modules(manager)
        if action == "info":
            if len(args) < 2:
                return "Usage: hmr info <module>"
            return format_module_info(manager, args[1])
        return HELP_TEXT

    async def cmd_reload(args: list[str], raw: str) -> str:
        return await reload(args[0] if args else None)

    commands.register(
        "hmr",
        cmd_hmr,
        description="Hot reload controls",
        usage="hmr [status|reload|enable|disable|modules|info] [module]",
        aliases=["hot"],
        owning_module=CONTROL_MODULE,
    )
    commands.register(
        "reload",
        cmd_reload,
        description="Quick module reload",
        usage="reload [module]",
        owning_module=CONTROL_MODULE,
    )
