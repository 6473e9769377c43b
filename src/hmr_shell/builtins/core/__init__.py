"""Core commands - help, clear, history, echo, about."""
from __future__ import annotations

from typing import TYPE_CHECKING

from hmr_shell.modules.registrar import RegistrarKind

if TYPE_CHECKING:
    from hmr_shell.host import Host

REGISTRAR_KIND = RegistrarKind.CORE

ABOUT_TEXT = """\
hmr-shell - command shell with hot module reloading

Commands come from modules that can be edited and reloaded while the
shell keeps running. Type 'help' for available commands and
'hmr' for hot reload controls."""


def format_help(host: "Host") -> str:
    """Commands grouped by owning module."""
    grouped: dict[str, list] = {}
    for entry in host.commands.all_commands():
        grouped.setdefault(entry.owning_module, []).append(entry)

    lines = ["Commands:"]
    for module in sorted(grouped):
        lines.append(f"  [{module}]")
        for entry in grouped[module]:
            aliases = f" ({', '.join(entry.aliases)})" if entry.aliases else ""
            lines.append(f"    {entry.name:<16} - {entry.description}{aliases}")
    return "\n".join(lines)


def register_core_commands(host: "Host") -> None:
    commands = host.commands

    def cmd_help(args: list[str], raw: str) -> str:
        """Show all commands, or usage for one."""
        if args:
            entry = commands.get(args[0].lower())
            if entry is None:
                return f"No such command: {args[0]}"
            usage = entry.usage or entry.name
            return f"{usage}\n  {entry.description}"
        return format_help(host)

    def cmd_clear(args: list[str], raw: str) -> None:
        host.output("\033[2J\033[H")

    def cmd_history(args: list[str], raw: str) -> str:
        """Show recent commands, newest last."""
        entries = commands.history
        if args:
            try:
                entries = entries[:int(args[0])]
            except ValueError:
                return "Usage: history [n]"
        lines = [f"  {i:>3}  {cmd}" for i, cmd in enumerate(reversed(entries), 1)]
        return "\n".join(lines) if lines else "No history"

    def cmd_echo(args: list[str], raw: str) -> str:
        return " ".join(args)

    def cmd_about(args: list[str], raw: str) -> str:
        return ABOUT_TEXT

    commands.register("help", cmd_help, "Show available commands", usage="help [command]", aliases=["h", "?"])
    commands.register("clear", cmd_clear, "Clear the screen", aliases=["cls"])
    commands.register("history", cmd_history, "Show command history", usage="history [n]")
    commands.register("echo", cmd_echo, "Print arguments", usage="echo <text>")
    commands.register("about", cmd_about, "About this shell")
