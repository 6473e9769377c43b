"""
Configuration management for hmr-shell.

Provides a configuration file at ~/.hmr_shell/config.json for default settings.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from hmr_shell.modules.datamodels import ModuleDescriptor

logger = logging.getLogger(__name__)

# Environment override for dev_mode ("1"/"true"/"yes" or "0"/"false"/"no")
DEV_MODE_ENV = "HMR_SHELL_DEV"

# Default values - single source of truth
DEFAULTS = {
    "dev_mode": False,
    "history_size": 100,
    "modules_dir": str(Path.home() / ".hmr_shell" / "modules"),
    "watch": False,
    "watch_interval": 2.0,
    "auto_reload": False,
    "simple": False,
    "log_level": "WARNING",
}


class Config(BaseModel):
    """Configuration settings for hmr-shell.

    All settings are optional. Use DEFAULTS for default values.
    """

    model_config = {"extra": "ignore"}  # Ignore unknown fields like _comment

    # Hot reload settings
    dev_mode: Optional[bool] = Field(
        default=None,
        description="Allow hot reloading of modules"
    )
    watch: Optional[bool] = Field(
        default=None,
        description="Poll module sources for changes"
    )
    watch_interval: Optional[float] = Field(
        default=None,
        description="Seconds between source change checks"
    )
    auto_reload: Optional[bool] = Field(
        default=None,
        description="Reload modules automatically when their source changes"
    )

    # Module settings
    modules_dir: Optional[str] = Field(
        default=None,
        description="Directory scanned for user modules"
    )
    modules: Optional[list[ModuleDescriptor]] = Field(
        default=None,
        description="Extra modules to load at startup"
    )

    # Shell settings
    history_size: Optional[int] = Field(
        default=None,
        description="Number of commands kept in history"
    )
    simple: Optional[bool] = Field(
        default=None,
        description="Use simple shell (no prompt_toolkit)"
    )

    # Logging settings
    log_level: Optional[str] = Field(
        default=None,
        description="Console log level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Write a full debug log to this file"
    )

    def get(self, key: str, default: Any = None) -> Any:
        """Value of a setting; unset settings come from DEFAULTS, then default."""
        value = getattr(self, key, None)
        return value if value is not None else DEFAULTS.get(key, default)

    def dev_mode_enabled(self) -> bool:
        """dev_mode with the environment override applied."""
        env = os.environ.get(DEV_MODE_ENV, "").strip().lower()
        if env in ("1", "true", "yes", "on"):
            return True
        if env in ("0", "false", "no", "off"):
            return False
        return bool(self.get("dev_mode"))


class ConfigManager:
    """Reads and writes ~/.hmr_shell/config.json.

    The file keeps whatever the user put in it (comments, unknown keys);
    writes only touch the keys being changed.
    """

    CONFIG_DIR = Path.home() / ".hmr_shell"
    CONFIG_FILE = CONFIG_DIR / "config.json"

    def __init__(self):
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """Cached Config, read from disk on first access."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self, create_if_missing: bool = True) -> Config:
        """Read the config file into a Config.

        Args:
            create_if_missing: Write a file with the default values when
                there is none yet.

        Returns:
            The parsed Config; an empty Config when the file is missing
            or unreadable.
        """
        if not self.CONFIG_FILE.exists():
            if create_if_missing:
                self._write(self._default_document())
            return Config()

        try:
            return Config.model_validate(json.loads(self.CONFIG_FILE.read_text()))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Ignoring invalid config file {self.CONFIG_FILE}: {e}")
            return Config()

    @staticmethod
    def _default_document() -> dict[str, Any]:
        document: dict[str, Any] = {"_comment": "hmr-shell configuration file"}
        document.update(DEFAULTS)
        document["log_file"] = None
        document["modules"] = []
        return document

    def _read_raw(self) -> dict[str, Any]:
        """The file's JSON object as-is, or {} if absent or corrupt."""
        if not self.CONFIG_FILE.exists():
            return {}
        try:
            return json.loads(self.CONFIG_FILE.read_text())
        except json.JSONDecodeError:
            return {}

    def _write(self, document: dict[str, Any]) -> Path:
        self.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        self.CONFIG_FILE.write_text(json.dumps(document, indent=2) + "\n")
        return self.CONFIG_FILE

    def save(self, config: Optional[Config] = None) -> Path:
        """Merge the set values of a Config into the file.

        Args:
            config: Config to store (becomes the cached config). Defaults to
                the cached one.

        Returns:
            Path of the written file.
        """
        if config is not None:
            self._config = config
        elif self._config is None:
            self._config = Config()

        document = self._read_raw()
        document.update({
            key: value
            for key, value in self._config.model_dump(mode="json").items()
            if value is not None
        })
        return self._write(document)

    def set(self, key: str, value: Any) -> None:
        """Change one setting and save it.

        The value goes through Config validation, so "true" or "2.5" from
        the command line end up as bool/float.

        Raises:
            ValueError: Unknown key, or a value the field rejects.
        """
        if key not in Config.model_fields:
            raise ValueError(f"Unknown config key: {key}")

        # Another process may have written the file since we cached it
        data = self.load(create_if_missing=True).model_dump()
        data[key] = value
        self._config = Config.model_validate(data)
        self.save()

    def unset(self, key: str) -> None:
        """Null a setting so its DEFAULTS value applies again."""
        if key not in Config.model_fields:
            raise ValueError(f"Unknown config key: {key}")

        self._config = self.load(create_if_missing=True)
        setattr(self._config, key, None)

        document = self._read_raw()
        if key in document:
            document[key] = None
        self._write(document)

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def list_settings(self) -> dict[str, Any]:
        """Settings the user changed from their DEFAULTS value."""
        return {
            key: value
            for key, value in self.config.model_dump(mode="json").items()
            if value not in (None, [])
            and (key not in DEFAULTS or value != DEFAULTS[key])
        }

    def reset(self) -> None:
        """Forget all settings and delete the file."""
        self._config = Config()
        self.CONFIG_FILE.unlink(missing_ok=True)


_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Process-wide ConfigManager."""
    global _manager
    if _manager is None:
        _manager = ConfigManager()
    return _manager


def get_config() -> Config:
    return get_config_manager().config
