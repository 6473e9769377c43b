"""
hmr_shell - Command shell with hot module reloading

Commands are contributed by modules loaded from disk. In dev mode a module
can be edited and reloaded while the shell keeps running: its commands are
unregistered, the fresh source is loaded, and its registrar runs again.

Example usage:
    import asyncio
    from hmr_shell import Host

    async def main():
        host = Host(dev_mode=True)
        await host.start()
        result = await host.commands.execute("echo hello")
        print(result.result)            # hello
        await host.modules.hot_reload_module("core")

    asyncio.run(main())
"""

__version__ = "0.1.0"

# Core exports
from hmr_shell.core import (
    BUILTIN_MODULE,
    CommandEntry,
    CommandHistory,
    CommandRegistry,
    CommandResult,
    HotReloadDisabledError,
    HotReloadError,
    ModuleLoadError,
    ModuleNotRegisteredError,
    ModuleReloadError,
    RegistrarError,
    ShellError,
    Suggestion,
)
from hmr_shell.modules import (
    ModuleDescriptor,
    ModuleLoader,
    ModuleRecord,
    ModuleRegistry,
    RegistrarKind,
    ReloadReport,
    get_hot_reload_api,
)


# Lazy import for Host (pulls in config)
def __getattr__(name):
    if name == "Host":
        from hmr_shell.host import Host
        return Host
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Core
    "CommandRegistry",
    "CommandHistory",
    "CommandEntry",
    "CommandResult",
    "Suggestion",
    "BUILTIN_MODULE",
    # Modules
    "ModuleRegistry",
    "ModuleLoader",
    "ModuleRecord",
    "ModuleDescriptor",
    "RegistrarKind",
    "ReloadReport",
    "get_hot_reload_api",
    # Host (lazy loaded)
    "Host",
    # Exceptions
    "ShellError",
    "HotReloadError",
    "HotReloadDisabledError",
    "ModuleNotRegisteredError",
    "ModuleReloadError",
    "ModuleLoadError",
    "RegistrarError",
]
