"""
Configuration management for anchor.
"""
from .config_manager import (
    Config,
    ConfigManager,
    SETTINGS_ATTRIBUTES,
    get_config_manager,
    load_config,
    get_config,
    set_config
)
from .presets import ConfigPresets

__all__ = [
    'Config',
    'ConfigManager',
    'SETTINGS_ATTRIBUTES',
    'get_config_manager',
    'load_config',
    'get_config',
    'set_config',
    'ConfigPresets',
]
