"""
Process-wide hot reload handle for tooling.

The host installs its module registry here so scripts and debuggers can
reach hot reload without holding a reference to the host:

    from hmr_shell.modules import get_hot_reload_api
    await get_hot_reload_api().reload("core")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from hmr_shell.modules.datamodels import HotReloadStatus, ModuleRecord, ReloadReport
    from hmr_shell.modules.manager import ModuleRegistry


class HotReloadAPI:
    """Thin facade over a ModuleRegistry."""

    def __init__(self, manager: "ModuleRegistry"):
        self._manager = manager

    async def reload(self, module: str) -> "ModuleRecord":
        return await self._manager.hot_reload_module(module)

    async def reload_all(self) -> "ReloadReport":
        return await self._manager.hot_reload_all()

    def status(self) -> "HotReloadStatus":
        return self._manager.status()

    def enable(self) -> None:
        self._manager.enable()

    def disable(self) -> None:
        self._manager.disable()

    def modules(self) -> list[str]:
        return self._manager.module_names()

    def info(self, module: str) -> Optional["ModuleRecord"]:
        return self._manager.get_module_info(module)


# Singleton handle
_api: Optional[HotReloadAPI] = None


def install_hot_reload_api(manager: "ModuleRegistry") -> HotReloadAPI:
    """Expose a module registry as the process-wide handle."""
    global _api
    _api = HotReloadAPI(manager)
    return _api


def uninstall_hot_reload_api(manager: Optional["ModuleRegistry"] = None) -> None:
    """Remove the handle (only if it wraps ``manager``, when given)."""
    global _api
    if _api is not None and (manager is None or _api._manager is manager):
        _api = None


def get_hot_reload_api() -> Optional[HotReloadAPI]:
    """Get the installed handle, or None if no host is running."""
    return _api
