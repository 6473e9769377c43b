"""Configuration management for hmr-shell."""

from hmr_shell.config.config import (
    DEFAULTS,
    DEV_MODE_ENV,
    Config,
    ConfigManager,
    get_config,
    get_config_manager,
)

__all__ = [
    "DEFAULTS",
    "DEV_MODE_ENV",
    "Config",
    "ConfigManager",
    "get_config",
    "get_config_manager",
]
