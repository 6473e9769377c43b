"""
Exception classes for the command and module runtime.
"""


class ShellError(Exception):
    """Base exception for hmr-shell errors."""


class RegistrarError(ShellError):
    """A module's registration entry point is missing or unusable."""


class ModuleLoadError(ShellError):
    """Module source could not be fetched or executed."""


class HotReloadError(ShellError):
    """Base exception for hot-reload failures."""


class HotReloadDisabledError(HotReloadError):
    """Hot reload was requested while it is disabled."""


class ModuleNotRegisteredError(HotReloadError, KeyError):
    """Module name not found in the module registry."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class ModuleReloadError(HotReloadError):
    """Hot reload of a single module failed."""

    def __init__(self, module_name: str, message: str):
        super().__init__(message)
        self.module_name = module_name
