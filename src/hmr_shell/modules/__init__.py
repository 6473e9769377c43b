"""
Module lifecycle for hmr-shell.

Modules are loaded from:
1. Package builtins (core, system)
2. ~/.hmr_shell/modules/ (user-hackable)
3. Descriptors listed in the config file
"""

from __future__ import annotations

from hmr_shell.modules.api import HotReloadAPI, get_hot_reload_api, install_hot_reload_api
from hmr_shell.modules.control import CONTROL_MODULE, register_hot_reload_commands
from hmr_shell.modules.datamodels import (
    HotReloadStatus,
    ModuleDescriptor,
    ModuleRecord,
    ModuleState,
    ReloadOutcome,
    ReloadReport,
)
from hmr_shell.modules.events import AFTER_RELOAD, BEFORE_RELOAD, ERROR, MODULE_UPDATE
from hmr_shell.modules.loader import Loader, ModuleLoader, discover_modules
from hmr_shell.modules.manager import ModuleRegistry
from hmr_shell.modules.registrar import REGISTRAR_VOCABULARY, RegistrarKind, invoke_registrar
from hmr_shell.modules.watcher import ChangeWatcher

__all__ = [
    "ModuleRegistry",
    "ModuleLoader",
    "Loader",
    "ChangeWatcher",
    "discover_modules",
    # Registrars
    "RegistrarKind",
    "REGISTRAR_VOCABULARY",
    "invoke_registrar",
    # Models
    "ModuleDescriptor",
    "ModuleRecord",
    "ModuleState",
    "ReloadOutcome",
    "ReloadReport",
    "HotReloadStatus",
    # Events
    "BEFORE_RELOAD",
    "AFTER_RELOAD",
    "MODULE_UPDATE",
    "ERROR",
    # Control surface
    "CONTROL_MODULE",
    "register_hot_reload_commands",
    "HotReloadAPI",
    "get_hot_reload_api",
    "install_hot_reload_api",
]
