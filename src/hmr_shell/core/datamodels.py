"""
Data models for the command registry.
"""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, Field

# Owner recorded for commands registered outside any module
BUILTIN_MODULE = "builtin"


class CommandEntry(BaseModel):
    """Registry entry for a single command."""
    name: str
    handler: Callable[..., Any] = Field(exclude=True)
    description: str = ""
    usage: str = ""
    aliases: list[str] = Field(default_factory=list)
    owning_module: str = BUILTIN_MODULE

    model_config = {"arbitrary_types_allowed": True}

    def to_dict(self) -> dict[str, Any]:
        """Display-friendly summary of the command."""
        return {
            "name": self.name,
            "description": self.description,
            "usage": self.usage,
            "aliases": list(self.aliases),
            "module": self.owning_module,
        }


class CommandResult(BaseModel):
    """Outcome of executing a command string."""
    success: bool
    result: Any = None
    error: str | None = None
    reloading: bool = False

    @classmethod
    def ok(cls, result: Any = None) -> CommandResult:
        return cls(success=True, result=result)

    @classmethod
    def fail(cls, error: str, reloading: bool = False) -> CommandResult:
        return cls(success=False, error=error, reloading=reloading)


class Suggestion(BaseModel):
    """Autocomplete suggestion for a partially typed command."""
    command: str
    description: str = ""
    is_alias: bool = False
