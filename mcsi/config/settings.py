"""
Configuration management for mcsi.

Settings live in one YAML file under the user config directory. Values
missing from the file fall back to built-in defaults.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from platformdirs import user_config_dir

from ..constants import (
    DEFAULT_TIMEOUT_SECONDS, DOWNLOAD_CHUNK_SIZE, DOWNLOAD_MAX_RETRIES,
    DOWNLOAD_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MCSI_CONFIG"


class Config:
    """YAML backed settings with dotted key access."""

    def __init__(self, config_file: Optional[Path] = None) -> None:
        self.app_name = "mcsi"
        if config_file is None:
            env_file = os.environ.get(CONFIG_ENV_VAR)
            if env_file:
                config_file = Path(env_file)
            else:
                config_file = Path(user_config_dir(self.app_name)) / "config.yaml"
        self.config_file = Path(config_file)
        self.config_dir = self.config_file.parent

        self._defaults = {
            "api": {
                "timeout": DEFAULT_TIMEOUT_SECONDS,
            },
            "downloads": {
                "timeout": DOWNLOAD_TIMEOUT_SECONDS,
                "chunk_size": DOWNLOAD_CHUNK_SIZE,
                "max_retries": DOWNLOAD_MAX_RETRIES,
            },
            "logging": {
                "level": "info",
                "file_logging": True,
            },
            "ui": {
                "progress_bar": True,
                "colored_output": True,
                "rich_logging": True,
            },
            "java": {
                "executable": None,
            },
        }

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Read the settings file merged over the defaults; a missing or broken file yields the defaults."""
        if not self.config_file.exists():
            return copy.deepcopy(self._defaults)

        try:
            with open(self.config_file, 'r') as f:
                config = yaml.safe_load(f) or {}

            if not isinstance(config, dict):
                raise ValueError("top level of the configuration must be a mapping")

            merged_config = self._merge_configs(self._defaults, config)

            logger.debug(f"Loaded configuration from {self.config_file}")
            return merged_config

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")
            return copy.deepcopy(self._defaults)

    def _merge_configs(self, defaults: Dict, user_config: Dict) -> Dict:
        """Overlay ``user_config`` onto ``defaults``, merging nested mappings."""
        result = copy.deepcopy(defaults)

        for key, value in user_config.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """Look up ``section.key``, returning ``default`` when any part is missing."""
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set ``section.key`` in memory; call ``save_config`` to persist it."""
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def flatten(self) -> List[Tuple[str, Any]]:
        """Return every leaf setting as ``(dotted.key, value)``, sorted by key."""
        items = []

        def walk(prefix: str, node: Dict) -> None:
            for key, value in node.items():
                dotted = f"{prefix}.{key}" if prefix else str(key)
                if isinstance(value, dict):
                    walk(dotted, value)
                else:
                    items.append((dotted, value))

        walk("", self._config)
        return sorted(items)

    def save_config(self, config: Optional[Dict] = None) -> bool:
        """Write the settings (or ``config``) to the config file. Returns False on failure."""
        try:
            config_to_save = config or self._config

            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                yaml.safe_dump(config_to_save, f, default_flow_style=False, indent=2)

            logger.info(f"Wrote settings to {self.config_file}")
            return True

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Cannot write {self.config_file}: {e}")
            return False

    def reset_to_defaults(self) -> None:
        """Replace every setting with its default and persist the result."""
        self._config = copy.deepcopy(self._defaults)
        self.save_config()
        logger.info("Settings reset to defaults")


# Process-wide settings, read once at import
config = Config()
