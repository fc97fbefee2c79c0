"""
Predefined validator settings.
"""
from typing import Dict, Any


class ConfigPresets:
    """Collection of predefined configuration presets."""

    @staticmethod
    def default() -> Dict[str, Any]:
        """Settings matching the library defaults."""
        return {
            'max_depth': 50,
            'strict_objects': False,
            'unknown_rules': 'report',
            'max_workers': 4,
            'log_level': 'WARNING'
        }

    @staticmethod
    def strict() -> Dict[str, Any]:
        """Flag undeclared attributes and fail loudly on unknown rules."""
        return {
            'max_depth': 50,
            'strict_objects': True,
            'unknown_rules': 'raise',
            'max_workers': 4,
            'log_level': 'INFO'
        }

    @staticmethod
    def lenient() -> Dict[str, Any]:
        """Shallow matching that ignores rules it does not know."""
        return {
            'max_depth': 10,
            'strict_objects': False,
            'unknown_rules': 'ignore',
            'max_workers': 8,
            'log_level': 'WARNING'
        }

    @staticmethod
    def get_preset(name: str) -> Dict[str, Any]:
        """Get preset by name."""
        presets = {
            'default': ConfigPresets.default,
            'strict': ConfigPresets.strict,
            'lenient': ConfigPresets.lenient
        }

        if name not in presets:
            raise ValueError(f"Unknown preset: {name}. Available: {list(presets.keys())}")

        return presets[name]()
