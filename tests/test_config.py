"""Tests for configuration management."""
import json
import logging

import pytest
from config import Config, ConfigManager, ConfigPresets
from utils.exceptions import ConfigurationError
from utils.logging_config import LoggerFactory
from validation import TypeRegistry, Validator


class TestConfig:
    """Tests for the config container."""

    def test_dot_access(self):
        """Test attribute and dotted-key access."""
        config = Config({'matcher': {'max_depth': 3}})
        assert config.matcher.max_depth == 3
        assert config.get('matcher.max_depth') == 3
        assert config.get('matcher.missing', 'fallback') == 'fallback'

    def test_deep_update(self):
        """Test nested updates merge."""
        config = Config({'a': {'b': 1, 'c': 2}})
        config.update({'a': {'c': 3}})
        assert config.to_dict() == {'a': {'b': 1, 'c': 3}}


class TestConfigManager:
    """Tests for loading settings."""

    def test_defaults(self):
        """Test the default preset is loaded."""
        manager = ConfigManager()
        assert manager.get('max_depth') == 50
        assert manager.get('unknown_rules') == 'report'

    def test_load_yaml(self, tmp_path):
        """Test loading settings from YAML."""
        path = tmp_path / 'anchor.yaml'
        path.write_text('max_depth: 7\nstrict_objects: true\n')
        manager = ConfigManager()
        manager.load_from_file(str(path))
        assert manager.get('max_depth') == 7
        assert manager.get('strict_objects') is True

    def test_load_json(self, tmp_path):
        """Test loading settings from JSON."""
        path = tmp_path / 'anchor.json'
        path.write_text(json.dumps({'unknown_rules': 'ignore'}))
        manager = ConfigManager()
        manager.load_from_file(str(path))
        assert manager.get('unknown_rules') == 'ignore'

    def test_invalid_settings_rejected(self, tmp_path):
        """Test settings are validated before merging."""
        path = tmp_path / 'bad.yaml'
        path.write_text('max_depth: 0\nunknown_rules: sometimes\n')
        manager = ConfigManager()
        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_from_file(str(path))
        assert exc_info.value.details['errors'] == {
            'max_depth': [{'rule': 'min', 'value': 0}],
            'unknown_rules': [{'rule': 'in', 'value': 'sometimes'}],
        }
        assert manager.get('max_depth') == 50

    def test_missing_file(self):
        """Test a missing file is a configuration error."""
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file('/nonexistent/anchor.yaml')

    def test_unsupported_format(self, tmp_path):
        """Test unknown extensions are rejected."""
        path = tmp_path / 'anchor.ini'
        path.write_text('max_depth = 3')
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file(str(path))

    def test_load_from_env(self, monkeypatch):
        """Test environment variables with the ANCHOR_ prefix."""
        monkeypatch.setenv('ANCHOR_MAX_DEPTH', '12')
        monkeypatch.setenv('ANCHOR_STRICT_OBJECTS', 'true')
        manager = ConfigManager()
        manager.load_from_env()
        assert manager.get('max_depth') == 12
        assert manager.get('strict_objects') is True

    def test_set_is_checked(self):
        """Test single settings are validated."""
        manager = ConfigManager()
        with pytest.raises(ConfigurationError):
            manager.set('max_workers', 'many')
        manager.set('max_workers', 2)
        assert manager.get('max_workers') == 2

    def test_save_and_reload(self, tmp_path):
        """Test saving settings round-trips through YAML."""
        manager = ConfigManager(ConfigPresets.lenient())
        path = tmp_path / 'out' / 'anchor.yaml'
        manager.save_to_file(str(path))
        reloaded = ConfigManager()
        reloaded.load_from_file(str(path))
        assert reloaded.get_config().to_dict() == ConfigPresets.lenient()

    def test_build_validator(self):
        """Test the settings reach the validator."""
        manager = ConfigManager(ConfigPresets.strict())
        validator = manager.build_validator(types=TypeRegistry.with_builtins())
        assert isinstance(validator, Validator)
        assert validator.matcher.strict is True
        assert validator.matcher.rules.unknown_rules == 'raise'
        assert validator.max_workers == 4

    def test_configure_logging(self):
        """Test the configured level is applied to the package logger."""
        manager = ConfigManager()
        manager.set('log_level', 'DEBUG')
        try:
            manager.configure_logging(enable_console=False)
            assert logging.getLogger('anchor').level == logging.DEBUG
        finally:
            LoggerFactory.reset()

    def test_unknown_preset(self):
        """Test preset lookup."""
        assert ConfigPresets.get_preset('strict')['strict_objects'] is True
        with pytest.raises(ValueError):
            ConfigPresets.get_preset('paranoid')
