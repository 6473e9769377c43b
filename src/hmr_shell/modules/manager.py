"""
Module registry and hot-reload manager.

Tracks loaded command modules and replaces a module's code at runtime:
its commands are unregistered, fresh source is loaded through the loader,
and the module's registrar runs again against the host.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Callable, Optional

from hmr_shell.core.exceptions import (
    HotReloadDisabledError,
    ModuleNotRegisteredError,
    ModuleReloadError,
)
from hmr_shell.core.helpers import increment_version
from hmr_shell.core.registry import CommandRegistry
from hmr_shell.modules.datamodels import (
    HotReloadStatus,
    ModuleRecord,
    ModuleState,
    ReloadOutcome,
    ReloadReport,
)
from hmr_shell.modules.events import AFTER_RELOAD, BEFORE_RELOAD, ERROR, MODULE_UPDATE, EventEmitter
from hmr_shell.modules.loader import Loader, ModuleLoader
from hmr_shell.modules.registrar import invoke_registrar
from hmr_shell.modules.watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Registry of loaded modules with hot-reload support."""

    def __init__(
        self,
        commands: CommandRegistry,
        host: Any = None,
        loader: Optional[Loader] = None,
        enabled: bool = False,
    ):
        self.commands = commands
        # Object handed to module registrars
        self.host = host if host is not None else SimpleNamespace(commands=commands, modules=self)
        self.loader: Loader = loader if loader is not None else ModuleLoader()
        self.enabled = enabled
        self.is_reloading = False
        self.watcher: Optional[ChangeWatcher] = None

        self._records: dict[str, ModuleRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._events = EventEmitter()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def register_module(
        self,
        name: str,
        source: str,
        exports: Any,
        version: str = "1.0.0",
        dependencies: Optional[list[str]] = None,
    ) -> ModuleRecord:
        """Create or overwrite the record for a module.

        Does not register commands; the caller runs the module's registrar.
        """
        record = ModuleRecord(
            name=name,
            source=str(source),
            exports=exports,
            version=version,
            dependencies=list(dependencies or []),
        )
        previous = self._records.get(name)
        if previous is not None:
            record.dependents = previous.dependents
        self._records[name] = record

        for dep in record.dependencies:
            dep_record = self._records.get(dep)
            if dep_record is not None and name not in dep_record.dependents:
                dep_record.dependents.append(name)

        self._events.emit(MODULE_UPDATE, {"name": name, "action": "register", "module": record})
        logger.info(f"Module '{name}' registered (v{version})")
        return record

    def get_module_info(self, name: str) -> Optional[ModuleRecord]:
        return self._records.get(name)

    def module_names(self) -> list[str]:
        """Registered module names in registration order."""
        return list(self._records)

    def records(self) -> list[ModuleRecord]:
        return list(self._records.values())

    def __contains__(self, name: str) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, callback: Callable[[dict[str, Any]], Any]) -> None:
        self._events.on(event, callback)

    def off(self, event: str, callback: Callable[[dict[str, Any]], Any]) -> None:
        self._events.off(event, callback)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def fetch(self, name: str, source: str, version: str) -> Any:
        """Load fresh module exports through the loader."""
        exports = self.loader.load(name, source, version)
        if inspect.isawaitable(exports):
            exports = await exports
        return exports

    async def hot_reload_module(self, name: str) -> ModuleRecord:
        """
        Replace a module's code and re-register its commands.

        Cancelling the call rolls the record back like a failure (state
        FAILED) and re-raises the cancellation.

        Args:
            name: Registered module name

        Returns:
            The updated ModuleRecord.

        Raises:
            HotReloadDisabledError: If hot reload is disabled.
            ModuleNotRegisteredError: If no such module is registered.
            ModuleReloadError: If fetching or re-registration fails.
        """
        if not self.enabled:
            raise HotReloadDisabledError("Hot reload is disabled (enable it with 'hmr enable')")

        record = self._records.get(name)
        if record is None:
            raise ModuleNotRegisteredError(f"Module '{name}' not found in registry")

        lock = self._locks.setdefault(name, asyncio.Lock())
        async with lock:
            return await self._reload(record)

    async def _reload(self, record: ModuleRecord) -> ModuleRecord:
        name = record.name
        logger.info(f"Hot reloading module: {name}...")

        snapshot = record.snapshot()
        record.state = ModuleState.RELOADING
        self._events.emit(BEFORE_RELOAD, {"name": name, "module": record})

        owned = [self.commands.get(cmd) for cmd in self.commands.commands_by_module(name)]
        self.commands.mark_reloading(name, [e for e in owned if e is not None])
        self.commands.unregister_all_for_module(name)

        new_version = increment_version(record.version)
        try:
            exports = await self.fetch(name, record.source, new_version)

            record.exports = exports
            record.reload_count += 1
            record.loaded_at = datetime.now()
            record.version = new_version

            with self.commands.owned_by(name):
                await invoke_registrar(exports, self.host)
        except asyncio.CancelledError:
            self._rollback(record, snapshot, "Reload cancelled")
            logger.warning(f"Hot reload of module '{name}' was cancelled")
            raise
        except Exception as e:
            self._rollback(record, snapshot, str(e))
            self._events.emit(ERROR, {"name": name, "error": e})
            logger.error(f"Failed to hot reload module '{name}': {e}")
            raise ModuleReloadError(name, f"Failed to hot reload module '{name}': {e}") from e
        finally:
            self.commands.clear_reloading(name)

        record.state = ModuleState.LOADED
        record.last_error = None
        self._events.emit(AFTER_RELOAD, {"name": name, "module": record})
        logger.info(f"Module '{name}' hot reloaded successfully (v{record.version})")
        return record

    def _rollback(self, record: ModuleRecord, snapshot: dict[str, Any], error: str) -> None:
        record.restore(snapshot)
        # Drop whatever a half-run registrar managed to add
        self.commands.unregister_all_for_module(record.name)
        record.state = ModuleState.FAILED
        record.last_error = error

    async def hot_reload_all(self) -> ReloadReport:
        """
        Reload every registered module in registration order.

        A call made while another reload-all is running does nothing and
        returns a report with already_in_progress set.
        """
        if not self.enabled:
            raise HotReloadDisabledError("Hot reload is disabled (enable it with 'hmr enable')")

        if self.is_reloading:
            logger.info("Reload already in progress...")
            return ReloadReport(already_in_progress=True)

        self.is_reloading = True
        start = time.monotonic()
        try:
            logger.info("Hot reloading all modules...")
            results: list[ReloadOutcome] = []

            for name in self.module_names():
                try:
                    record = await self.hot_reload_module(name)
                    results.append(ReloadOutcome(name=name, success=True, version=record.version))
                except Exception as e:
                    results.append(ReloadOutcome(name=name, success=False, error=str(e)))

            report = ReloadReport(
                results=results,
                duration_ms=(time.monotonic() - start) * 1000,
            )
            logger.info(
                f"Completed reload of {report.succeeded}/{report.total} modules "
                f"in {report.duration_ms:.0f}ms"
            )
            if report.failed:
                logger.warning(f"{report.failed} modules failed to reload")
            return report
        finally:
            self.is_reloading = False

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def status(self) -> HotReloadStatus:
        return HotReloadStatus(
            enabled=self.enabled,
            module_count=len(self._records),
            is_reloading=self.is_reloading,
            watchers_active=self.watcher is not None and self.watcher.running,
        )

    def enable(self) -> None:
        self.enabled = True
        logger.info("Hot reload enabled")

    def disable(self) -> None:
        self.enabled = False
        self.stop_watching()
        logger.info("Hot reload disabled")

    def start_watching(self, interval: float = 2.0, auto_reload: bool = False) -> ChangeWatcher:
        """Start polling module sources for changes on the running loop."""
        self.stop_watching()
        self.watcher = ChangeWatcher(self, interval=interval, auto_reload=auto_reload)
        self.watcher.start()
        return self.watcher

    def stop_watching(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None

    def destroy(self) -> None:
        """Stop watching and forget every module and listener."""
        self.stop_watching()
        unload = getattr(self.loader, "unload", None)
        if unload is not None:
            for name in self._records:
                unload(name)
        self._records.clear()
        self._locks.clear()
        self._events.clear()
        logger.info("Module registry destroyed")
