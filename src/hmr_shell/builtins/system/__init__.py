"""System commands - debug, uptime, time, exit."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from hmr_shell.logging import get_current_log_path
from hmr_shell.modules.registrar import RegistrarKind

if TYPE_CHECKING:
    from hmr_shell.host import Host

REGISTRAR_KIND = RegistrarKind.SYSTEM


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def debug_stats(host: "Host") -> dict[str, str]:
    """Runtime counters shown by 'debug stats'."""
    uptime = (datetime.now() - host.state["started_at"]).total_seconds()
    status = host.modules.status()
    return {
        "Uptime": _format_duration(uptime),
        "Commands run": str(host.state.get("command_count", 0)),
        "Registered commands": str(len(host.commands)),
        "Loaded modules": str(status.module_count),
        "Hot reload": "enabled" if status.enabled else "disabled",
        "History entries": str(len(host.commands.history)),
        "Log file": str(get_current_log_path() or "off"),
    }


def register_system_commands(host: "Host") -> None:
    commands = host.commands

    def cmd_debug(args: list[str], raw: str) -> str:
        action = args[0].lower() if args else ""
        if action == "on":
            host.state["debug"] = True
            return "Debug mode enabled"
        if action == "off":
            host.state["debug"] = False
            return "Debug mode disabled"
        if action == "stats":
            stats = debug_stats(host)
            return "\n".join(f"  {key:<20} {value}" for key, value in stats.items())
        return f"Debug mode is {'ON' if host.state.get('debug') else 'OFF'}"

    def cmd_uptime(args: list[str], raw: str) -> str:
        uptime = (datetime.now() - host.state["started_at"]).total_seconds()
        return f"Up {_format_duration(uptime)}"

    def cmd_time(args: list[str], raw: str) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def cmd_exit(args: list[str], raw: str) -> str:
        host.running = False
        return "Goodbye!"

    commands.register("debug", cmd_debug, "Toggle debug mode", usage="debug [on|off|stats]")
    commands.register("uptime", cmd_uptime, "Show shell uptime")
    commands.register("time", cmd_time, "Show the current time")
    commands.register("exit", cmd_exit, "Exit the shell", aliases=["quit", "q"])
