"""
Configuration Service Module

Reads and writes the remote-control settings stored in YAML.
"""

from typing import Any, Dict, Optional
from pathlib import Path
import copy
import os
import sys
import yaml
import threading
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/default_config.yaml"


class ConfigService:
    """
    Configuration Service - Singleton Pattern

    Built-in defaults are merged with the repository template and then the
    per-user file. A custom path replaces both template and user file,
    which keeps tests isolated.

    Usage Example:
        config = ConfigService()

        strict = config.get("command_line.strict_numbers", False)

        config.set("logging.level", "DEBUG")
        config.save()
    """

    _instance: Optional['ConfigService'] = None
    _lock = threading.Lock()

    def __new__(cls, config_path: str = None) -> 'ConfigService':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: str = None):
        if self._initialized:
            return

        provided_path = Path(config_path) if config_path else None

        # Passing the template path still means "default mode" so the template is never overwritten
        self._use_custom_path = provided_path is not None and provided_path != Path(DEFAULT_CONFIG_PATH)

        if self._use_custom_path:
            self._user_config_path = provided_path
        else:
            self._user_config_path = self._get_user_config_path()

        self._config: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._initialized = True

        self._load()

    @staticmethod
    def _get_user_config_path() -> Path:
        """Get user configuration file path (platform-specific)"""
        if sys.platform == "win32":
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / "clementine-remote" / "config.yaml"

    def _load(self) -> None:
        """Rebuild the configuration from defaults and files"""
        self._config = self._get_default_config()

        if self._use_custom_path:
            sources = [self._user_config_path]
        else:
            sources = [Path(DEFAULT_CONFIG_PATH), self._user_config_path]

        for path in sources:
            self._merge_file(path)

    def _merge_file(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load configuration %s: %s", path, e)
            return

        if not isinstance(loaded, dict):
            logger.warning("Ignoring configuration %s: top level is not a mapping", path)
            return
        self._deep_merge(self._config, loaded)

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge dictionaries, override overwrites base"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'app': {
                'name': 'Clementine',
            },
            'command_line': {
                'strict_numbers': False,    # Reject malformed numbers instead of ignoring them
            },
            'i18n': {
                'translations_file': '',    # YAML mapping of help strings to translations
            },
            'single_instance': {
                'server_name': 'clementine-remote',
                'timeout_ms': 1000,
            },
            'logging': {
                'level': 'WARNING',
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key, e.g. "single_instance.timeout_ms"
            default: Returned when the key is missing

        Returns:
            Configuration value or the default value.
        """
        with self._lock:
            value = self._config
            try:
                for k in key.split('.'):
                    value = value[k]
                return value
            except (KeyError, TypeError):
                return default

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (dot-separated key)."""
        with self._lock:
            keys = key.split('.')
            node = self._config
            for k in keys[:-1]:
                node = node.setdefault(k, {})
            node[keys[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of the whole configuration."""
        with self._lock:
            return copy.deepcopy(self._config)

    def save(self) -> bool:
        """
        Save configuration to the user (or custom) configuration file.

        Returns:
            bool: True if saving was successful.
        """
        try:
            self._user_config_path.parent.mkdir(parents=True, exist_ok=True)

            with self._lock:
                with open(self._user_config_path, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(self._config, f, allow_unicode=True, default_flow_style=False)
            logger.debug("Configuration saved to: %s", self._user_config_path)
            return True
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save configuration: %s", e)
            return False

    def reload(self) -> None:
        """Reload configuration from disk."""
        with self._lock:
            self._load()

    def reset(self) -> None:
        """Reset to default configuration."""
        with self._lock:
            self._config = self._get_default_config()

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing only)."""
        with cls._lock:
            cls._instance = None
