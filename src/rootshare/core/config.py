# src/rootshare/core/config.py
"""
RootShare - Sandboxed File Manager Server - Configuration Management
Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from . import constants
from .exceptions import ConfigurationError
from .utils import default_case_insensitive

log = logging.getLogger(__name__)

# --- Default Configuration Values ---
# Central source of truth for all application settings and their defaults.

DEFAULT_SETTINGS = {
    "root_path": str(constants.DEFAULT_ROOT_PATH),
    "host": constants.DEFAULT_HOST,
    "server_port": constants.DEFAULT_PORT,
    "log_level": constants.DEFAULT_LOG_LEVEL,
    "chunk_size": constants.DEFAULT_CHUNK_SIZE,
    # None means "pick the platform default"
    "case_insensitive": None,
}


class AppSettings(BaseModel):
    """Validated settings for one server process."""

    root_path: str = Field(..., min_length=1)
    host: str = constants.DEFAULT_HOST
    server_port: int = Field(constants.DEFAULT_PORT, ge=1, le=65535)
    log_level: str = constants.DEFAULT_LOG_LEVEL
    chunk_size: int = Field(constants.DEFAULT_CHUNK_SIZE, ge=constants.MIN_CHUNK_SIZE)
    case_insensitive: Optional[bool] = None

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level


@dataclass(frozen=True)
class FileManagerConfig:
    """
    The sandbox configuration shared by every file component.

    Built once at startup and handed to each component's constructor. ``root``
    is always absolute, canonical and an existing directory.
    """

    root: Path
    case_insensitive: bool
    chunk_size: int = constants.DEFAULT_CHUNK_SIZE
    temp_dir: Optional[Path] = None

    @classmethod
    def create(
        cls,
        root_path: str | os.PathLike,
        case_insensitive: Optional[bool] = None,
        chunk_size: int = constants.DEFAULT_CHUNK_SIZE,
        temp_dir: str | os.PathLike | None = None,
    ) -> "FileManagerConfig":
        """Canonicalizes the root, creating it if absent."""
        if chunk_size < constants.MIN_CHUNK_SIZE:
            raise ConfigurationError(
                f"chunk_size must be at least {constants.MIN_CHUNK_SIZE} bytes"
            )
        try:
            root = Path(os.path.expanduser(os.fspath(root_path)))
            root.mkdir(parents=True, exist_ok=True)
            canonical_root = Path(os.path.realpath(root))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot prepare root directory '{root_path}': {e}") from e
        if not canonical_root.is_dir():
            raise ConfigurationError(f"Root path '{root_path}' is not a directory")

        if case_insensitive is None:
            case_insensitive = default_case_insensitive()

        scratch = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())
        log.info(f"Sandbox root: {canonical_root} (case-insensitive: {case_insensitive})")
        return cls(
            root=canonical_root,
            case_insensitive=case_insensitive,
            chunk_size=chunk_size,
            temp_dir=scratch,
        )

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "FileManagerConfig":
        return cls.create(
            settings.root_path,
            case_insensitive=settings.case_insensitive,
            chunk_size=settings.chunk_size,
        )


class ConfigManager:
    """
    Manages application settings using a JSON file for all configuration.
    """

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else constants.CONFIG_FILE
        self._json_cache: Dict[str, Any] = {}
        self._load_from_file()

    def _load_from_file(self):
        """
        Loads configuration from the JSON file into the cache, ensuring that
        defaults are present for any missing keys.
        """
        self._json_cache = DEFAULT_SETTINGS.copy()
        if not self.config_file.exists():
            log.info("No config file found. Will use and save default settings.")
            try:
                self._save_to_file()
            except ConfigurationError:
                log.warning("Continuing with in-memory default settings.")
            return

        try:
            with self.config_file.open("r", encoding="utf-8") as f:
                user_config = json.load(f)
            if not isinstance(user_config, dict):
                raise ValueError("top-level JSON value must be an object")
            self._json_cache.update(user_config)
            log.info(f"Configuration loaded from {self.config_file}")
        except (IOError, ValueError) as e:
            log.error(f"Failed to load config file, using defaults instead: {e}")
            self._json_cache = DEFAULT_SETTINGS.copy()

    def _save_to_file(self):
        """Saves the configuration cache to the JSON file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with self.config_file.open("w", encoding="utf-8") as f:
                json.dump(self._json_cache, f, indent=4)
            log.debug(f"Configuration saved to {self.config_file}")
        except IOError as e:
            log.error(f"Failed to save config file: {e}")
            raise ConfigurationError(f"Cannot save configuration: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._json_cache.get(key, default)

    def set(self, key: str, value: Any):
        """
        Sets a configuration value and saves to file.
        """
        if key not in DEFAULT_SETTINGS:
            log.warning(f"Setting an unknown configuration key: '{key}'")

        self._json_cache[key] = value
        self._save_to_file()
        log.debug(f"Setting '{key}' saved to config file.")

    def reset_to_defaults(self):
        """Resets all configurations to their default states."""
        self._json_cache = DEFAULT_SETTINGS.copy()
        self._save_to_file()
        log.info("Configuration has been reset to defaults.")

    def build_settings(self, **overrides: Any) -> AppSettings:
        """
        Merges file values with non-None overrides (typically CLI flags) and
        validates the result.
        """
        values = {key: self._json_cache.get(key, default) for key, default in DEFAULT_SETTINGS.items()}
        values.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return AppSettings(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
