"""
Core module for the hmr_shell package.

Provides the Command Registry, command history and related models.
"""

from hmr_shell.core.datamodels import BUILTIN_MODULE, CommandEntry, CommandResult, Suggestion
from hmr_shell.core.exceptions import (
    HotReloadDisabledError,
    HotReloadError,
    ModuleLoadError,
    ModuleNotRegisteredError,
    ModuleReloadError,
    RegistrarError,
    ShellError,
)
from hmr_shell.core.helpers import increment_version, tokenize
from hmr_shell.core.history import DEFAULT_MAX_HISTORY, CommandHistory
from hmr_shell.core.registry import CommandRegistry

__all__ = [
    # Registry
    "CommandRegistry",
    "CommandHistory",
    "DEFAULT_MAX_HISTORY",
    # Models
    "BUILTIN_MODULE",
    "CommandEntry",
    "CommandResult",
    "Suggestion",
    # Exceptions
    "ShellError",
    "HotReloadError",
    "HotReloadDisabledError",
    "ModuleNotRegisteredError",
    "ModuleReloadError",
    "ModuleLoadError",
    "RegistrarError",
    # Helpers
    "tokenize",
    "increment_version",
]
