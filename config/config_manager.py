"""
Configuration management for validator settings.
"""
import os
import json
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from copy import deepcopy
from utils.logging_config import get_logger, LoggerFactory
from utils.exceptions import ConfigurationError
from validation.validator import Validator
from .presets import ConfigPresets

logger = get_logger(__name__)

ENV_PREFIX = "ANCHOR_"

# Rules the settings themselves must satisfy
SETTINGS_ATTRIBUTES = {
    'max_depth': {'type': 'integer', 'min': 1},
    'strict_objects': {'type': 'boolean'},
    'unknown_rules': {'type': 'string', 'enum': ['report', 'ignore', 'raise']},
    'max_workers': {'type': 'integer', 'min': 1},
    'log_level': {'type': 'string', 'enum': ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']},
}


class Config:
    """Configuration container with dot notation access."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = data or {}

    def __getattr__(self, key: str) -> Any:
        """Get config value using dot notation."""
        if key.startswith('_'):
            return object.__getattribute__(self, key)

        if key not in self._data:
            raise AttributeError(f"Config has no attribute '{key}'")

        value = self._data[key]
        if isinstance(value, dict):
            return Config(value)
        return value

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any):
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value with default; dotted keys reach into sections."""
        try:
            keys = key.split('.')
            value = self._data
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """Set config value using dot notation."""
        keys = key.split('.')
        data = self._data
        for k in keys[:-1]:
            if k not in data:
                data[k] = {}
            data = data[k]
        data[keys[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        return deepcopy(self._data)

    def update(self, other: Dict[str, Any]):
        """Update configuration with another dict."""
        self._deep_update(self._data, other)

    @staticmethod
    def _deep_update(base: Dict, update: Dict):
        """Recursively update nested dictionaries."""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                Config._deep_update(base[key], value)
            else:
                base[key] = value


class ConfigManager:
    """
    Validator settings gathered from presets, files and the environment.

    Every source is checked against ``SETTINGS_ATTRIBUTES`` before it is
    merged.
    """

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        self._config = Config(deepcopy(defaults) if defaults is not None else ConfigPresets.default())
        self._settings_validator = Validator()
        self._settings_validator.initialize(SETTINGS_ATTRIBUTES)
        self.logger = get_logger(self.__class__.__name__)

    def _check(self, data: Dict[str, Any], source: str):
        result = self._settings_validator.validate(data, present_only=True)
        if result is not None:
            errors = {
                attr: [error.to_dict() for error in found]
                for attr, found in result['ValidationError'].items()
            }
            raise ConfigurationError(
                f"Invalid settings from {source}: {sorted(errors)}",
                details={'source': source, 'errors': errors}
            )

    def load_from_file(self, filepath: str, validate: bool = True):
        """
        Load configuration from file (JSON or YAML).

        Args:
            filepath: Path to configuration file
            validate: Whether to check the settings before merging
        """
        path = Path(filepath)

        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {filepath}",
                details={'filepath': str(path)}
            )

        with open(path, 'r') as f:
            try:
                if path.suffix in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                elif path.suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported file format: {path.suffix}",
                        details={'filepath': str(path)}
                    )
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise ConfigurationError(
                    f"Failed to load configuration from {filepath}: {e}",
                    details={'filepath': str(path), 'error': str(e)}
                )

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration in {filepath} must be a mapping",
                details={'filepath': str(path)}
            )

        if validate:
            self._check(data, str(path))
        self._config.update(data)
        self.logger.info(f"Loaded configuration from {filepath}")

    def load_from_env(self, prefix: str = ENV_PREFIX):
        """
        Load configuration from environment variables.

        ``ANCHOR_MAX_DEPTH=10`` sets ``max_depth``. Values are parsed as JSON
        when possible so numbers and booleans keep their type.
        """
        env_config = {}

        for key, value in os.environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower()
                try:
                    env_config[config_key] = json.loads(value)
                except json.JSONDecodeError:
                    env_config[config_key] = value

        self._check(env_config, 'environment')
        self._config.update(env_config)
        self.logger.info(f"Loaded {len(env_config)} configuration values from environment")

    def load_from_dict(self, data: Dict[str, Any], validate: bool = True):
        """Load configuration from dictionary."""
        if validate:
            self._check(data, 'dict')
        self._config.update(data)
        self.logger.debug("Loaded configuration from dictionary")

    def save_to_file(self, filepath: str, format: str = 'yaml'):
        """
        Save configuration to file.

        Args:
            filepath: Path to save configuration
            format: File format ('yaml' or 'json')
        """
        if format not in ('yaml', 'json'):
            raise ConfigurationError(f"Unsupported format: {format}")

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            if format == 'yaml':
                yaml.safe_dump(self._config.to_dict(), f, default_flow_style=False)
            else:
                json.dump(self._config.to_dict(), f, indent=2)

        self.logger.info(f"Saved configuration to {filepath}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set one setting after checking it."""
        self._check({key: value}, 'set')
        self._config.set(key, value)
        self.logger.debug(f"Set config: {key} = {value}")

    def get_config(self) -> Config:
        return self._config

    def configure_logging(self, **kwargs):
        """Re-apply logging with the configured level."""
        LoggerFactory.reset()
        LoggerFactory.configure(log_level=self.get('log_level', 'WARNING'), **kwargs)

    def build_validator(self, types=None) -> Validator:
        """Create a Validator using the current settings."""
        return Validator.from_config(self._config, types=types)

    def clear(self):
        """Reset to the default preset."""
        self._config = Config(ConfigPresets.default())
        self.logger.info("Reset configuration to defaults")


# Global configuration manager instance
_global_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _global_config_manager
    if _global_config_manager is None:
        _global_config_manager = ConfigManager()
    return _global_config_manager


def load_config(filepath: str):
    """Load configuration from file into global manager."""
    manager = get_config_manager()
    manager.load_from_file(filepath)


def get_config(key: str, default: Any = None) -> Any:
    """Get configuration value from global manager."""
    manager = get_config_manager()
    return manager.get(key, default)


def set_config(key: str, value: Any):
    """Set configuration value in global manager."""
    manager = get_config_manager()
    manager.set(key, value)
