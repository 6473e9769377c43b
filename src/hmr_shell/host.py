"""
Host runtime - owns the registries and loads command modules.

The host is what module registrars receive. It exposes:
    host.commands  - the CommandRegistry
    host.modules   - the ModuleRegistry (hot reload)
    host.state     - shared dict for modules (survives reloads)
    host.output    - callable used to print to the user
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from hmr_shell.config import Config
from hmr_shell.core import CommandRegistry, CommandResult, ModuleLoadError
from hmr_shell.logging import log_exception
from hmr_shell.modules import (
    CONTROL_MODULE,
    ModuleDescriptor,
    ModuleRecord,
    ModuleRegistry,
    ModuleState,
    discover_modules,
    install_hot_reload_api,
    invoke_registrar,
    register_hot_reload_commands,
)
from hmr_shell.modules.api import uninstall_hot_reload_api
from hmr_shell.modules.loader import PACKAGE_BUILTINS_DIR, Loader, module_name_for

logger = logging.getLogger(__name__)

# Modules shipped with the package, loaded first
BUILTIN_MODULES = [
    ModuleDescriptor(name="core", source=str(PACKAGE_BUILTINS_DIR / "core")),
    ModuleDescriptor(name="system", source=str(PACKAGE_BUILTINS_DIR / "system")),
]


class LoadSummary(BaseModel):
    """Outcome of loading a list of module descriptors."""
    loaded: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)


class Host:
    """Shell runtime: command registry, module registry and shared state."""

    def __init__(
        self,
        config: Optional[Config] = None,
        loader: Optional[Loader] = None,
        output: Callable[[str], Any] = print,
        dev_mode: Optional[bool] = None,
    ):
        self.config = config or Config()
        self.output = output
        self.commands = CommandRegistry(max_history=self.config.get("history_size"))
        enabled = self.config.dev_mode_enabled() if dev_mode is None else dev_mode
        self.modules = ModuleRegistry(self.commands, host=self, loader=loader, enabled=enabled)
        self.state: dict[str, Any] = {
            "started_at": datetime.now(),
            "command_count": 0,
            "debug": False,
        }
        self.running = False

        register_hot_reload_commands(self.modules, self.commands)

    def module_descriptors(self) -> list[ModuleDescriptor]:
        """The startup module list: builtins, user modules, then config."""
        descriptors = list(BUILTIN_MODULES)

        modules_dir = Path(self.config.get("modules_dir")).expanduser()
        for source in discover_modules(modules_dir):
            descriptors.append(ModuleDescriptor(name=module_name_for(source), source=str(source)))

        descriptors.extend(self.config.modules or [])
        return descriptors

    async def load_module(self, descriptor: ModuleDescriptor) -> ModuleRecord:
        """
        Load one module, record it, and run its registrar.

        A module that fails to load or register is still recorded (state
        FAILED, no commands) so it can be fixed and hot reloaded.

        Raises:
            ModuleLoadError: If the name is reserved for the hot reload controls.
            Exception: Whatever the loader or registrar raised.
        """
        name = descriptor.name
        if name == CONTROL_MODULE:
            raise ModuleLoadError(f"Module name '{name}' is reserved for the hot reload commands")

        try:
            exports = await self.modules.fetch(name, descriptor.source, descriptor.version)
        except Exception as e:
            record = self.modules.register_module(
                name, descriptor.source, None, descriptor.version, descriptor.dependencies
            )
            record.state = ModuleState.FAILED
            record.last_error = str(e)
            raise

        record = self.modules.register_module(
            name, descriptor.source, exports, descriptor.version, descriptor.dependencies
        )
        try:
            with self.commands.owned_by(name):
                await invoke_registrar(exports, self)
        except Exception as e:
            self.commands.unregister_all_for_module(name)
            record.state = ModuleState.FAILED
            record.last_error = str(e)
            raise
        return record

    async def load_modules(self, descriptors: list[ModuleDescriptor]) -> LoadSummary:
        """Load each enabled descriptor in order; failures do not stop the rest."""
        summary = LoadSummary()
        for descriptor in descriptors:
            if not descriptor.enabled:
                summary.skipped.append(descriptor.name)
                continue
            try:
                await self.load_module(descriptor)
                summary.loaded.append(descriptor.name)
                logger.info(f"Loaded module: {descriptor.name}")
            except Exception as e:
                summary.failed[descriptor.name] = str(e)
                log_exception(e, f"Failed to load module '{descriptor.name}'")
        return summary

    async def start(self) -> LoadSummary:
        """Load the startup modules and bring up hot reload tooling."""
        summary = await self.load_modules(self.module_descriptors())

        if self.config.get("watch") and self.modules.enabled:
            self.modules.start_watching(
                interval=self.config.get("watch_interval"),
                auto_reload=self.config.get("auto_reload"),
            )

        install_hot_reload_api(self.modules)
        self.running = True
        return summary

    async def handle_input(self, line: str) -> Optional[CommandResult]:
        """Execute one line of user input and show the outcome."""
        result = await self.commands.execute(line)
        if result is None:
            return None

        self.state["command_count"] += 1
        self.state["last_activity"] = datetime.now()

        if not result.success:
            self.output(result.error)
        elif result.result is not None:
            self.output(str(result.result))
        return result

    def shutdown(self) -> None:
        """Tear down hot reload and stop the shell loop."""
        self.running = False
        uninstall_hot_reload_api(self.modules)
        self.modules.destroy()
