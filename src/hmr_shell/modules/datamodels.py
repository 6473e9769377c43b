"""
Data models for module records and hot-reload reporting.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ModuleState(str, Enum):
    """Lifecycle state of a loaded module."""
    LOADED = "loaded"
    RELOADING = "reloading"
    FAILED = "failed"


class ModuleDescriptor(BaseModel):
    """A module the host should load at startup."""
    name: str
    source: str
    enabled: bool = True
    version: str = "1.0.0"
    dependencies: list[str] = Field(default_factory=list)


class ModuleRecord(BaseModel):
    """Bookkeeping entry for a loaded module."""
    name: str
    source: str
    exports: Any = Field(default=None, exclude=True)
    version: str = "1.0.0"
    loaded_at: datetime = Field(default_factory=datetime.now)
    reload_count: int = 0
    state: ModuleState = ModuleState.LOADED
    last_error: Optional[str] = None
    dependencies: list[str] = Field(default_factory=list)
    dependents: list[str] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}

    def snapshot(self) -> dict[str, Any]:
        """Values a failed reload must restore."""
        return {
            "exports": self.exports,
            "version": self.version,
            "loaded_at": self.loaded_at,
            "reload_count": self.reload_count,
        }

    def restore(self, snapshot: dict[str, Any]) -> None:
        for key, value in snapshot.items():
            setattr(self, key, value)


class ReloadOutcome(BaseModel):
    """Result of reloading one module inside a batch."""
    name: str
    success: bool
    version: Optional[str] = None
    error: Optional[str] = None


class ReloadReport(BaseModel):
    """Aggregate result of hot_reload_all()."""
    results: list[ReloadOutcome] = Field(default_factory=list)
    duration_ms: float = 0.0
    already_in_progress: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def total(self) -> int:
        return len(self.results)


class HotReloadStatus(BaseModel):
    """Snapshot of the hot-reload subsystem."""
    enabled: bool
    module_count: int
    is_reloading: bool
    watchers_active: bool
