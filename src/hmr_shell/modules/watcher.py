"""
Source change detection for loaded modules.

Polls the modification time of each module's source on the event loop.
Best-effort only: failures are logged and the loop keeps running.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from hmr_shell.modules.manager import ModuleRegistry

logger = logging.getLogger(__name__)


class ChangeWatcher:
    """Periodic mtime checker that can trigger hot reloads."""

    def __init__(self, manager: "ModuleRegistry", interval: float = 2.0, auto_reload: bool = False):
        self.manager = manager
        self.interval = interval
        self.auto_reload = auto_reload
        self._mtimes: dict[str, float] = {}
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling. Must be called from a running event loop."""
        if self.running:
            return
        self.snapshot()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Watching module sources every {self.interval}s")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def snapshot(self) -> None:
        """Record current mtimes as the baseline."""
        for record in self.manager.records():
            mtime = self._mtime(record.source)
            if mtime is not None:
                self._mtimes[record.name] = mtime

    def _mtime(self, source: str) -> Optional[float]:
        source_mtime = getattr(self.manager.loader, "source_mtime", None)
        if source_mtime is None:
            return None
        return source_mtime(source)

    async def check_for_changes(self) -> list[str]:
        """Compare sources with the baseline and reload what changed.

        Returns:
            Names of modules whose source changed since the last check.
        """
        changed = []
        for record in self.manager.records():
            mtime = self._mtime(record.source)
            if mtime is None:
                continue
            last = self._mtimes.get(record.name)
            self._mtimes[record.name] = mtime
            if last is not None and mtime != last:
                changed.append(record.name)

        for name in changed:
            logger.info(f"Change detected in module '{name}'")
            if not (self.auto_reload and self.manager.enabled):
                continue
            try:
                await self.manager.hot_reload_module(name)
            except Exception as e:
                logger.warning(f"Automatic reload of '{name}' failed: {e}")

        return changed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.check_for_changes()
            except Exception:
                logger.exception("Module change check failed")
