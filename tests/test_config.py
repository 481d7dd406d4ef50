"""
Unit tests for configuration loading and validation.

Tests strict validation and error handling for the settings file.
"""

import os
import tempfile

import pytest
import yaml

from copilot_usage.config import loader
from copilot_usage.config.loader import (
    DEFAULT_STATUS_COMMAND,
    Settings,
    find_config_file,
    load_settings,
)
from copilot_usage.core.errors import ConfigurationError


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.missing_default = os.path.join(self.temp_dir, "absent", "config.yaml")

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_valid_config_loads_correctly(self):
        """Test that a valid configuration loads correctly."""
        config_data = {
            "plan": "Business",
            "limit": 450,
            "gh_path": "/opt/gh/bin/gh",
            "timeout": 10,
            "statusbar": {
                "command": ["i3status", "-c", "/etc/i3status.conf"],
                "refresh_interval": 120,
            },
        }

        settings = load_settings(self._write_config(config_data), environ={})

        assert settings.plan == "business"
        assert settings.limit == 450
        assert settings.gh_path == "/opt/gh/bin/gh"
        assert settings.timeout == 10.0
        assert settings.status_command == ("i3status", "-c", "/etc/i3status.conf")
        assert settings.refresh_interval == 120.0

    def test_partial_config_uses_defaults(self):
        """Test that absent keys keep their defaults."""
        settings = load_settings(self._write_config({"plan": "pro"}), environ={})

        assert settings == Settings(plan="pro")
        assert settings.status_command == DEFAULT_STATUS_COMMAND
        assert settings.refresh_interval == 60.0

    def test_command_string_is_split(self):
        """Test a shell-style command string is split into arguments."""
        config_path = self._write_config({"statusbar": {"command": "i3status -c '/my dir/config'"}})

        settings = load_settings(config_path, environ={})

        assert settings.status_command == ("i3status", "-c", "/my dir/config")

    def test_empty_file_returns_defaults(self):
        """Test that an empty file is the same as no file."""
        config_path = os.path.join(self.temp_dir, "empty.yaml")
        open(config_path, 'w').close()

        assert load_settings(config_path, environ={}) == Settings()

    def test_no_file_returns_defaults(self, monkeypatch):
        """Test that a missing default file is not an error."""
        monkeypatch.setattr(loader, "DEFAULT_CONFIG_PATH", loader.Path(self.missing_default))

        assert load_settings(environ={}) == Settings()

    def test_env_config_path(self, monkeypatch):
        """Test GH_COPILOT_CONFIG points at the file when --config is absent."""
        monkeypatch.setattr(loader, "DEFAULT_CONFIG_PATH", loader.Path(self.missing_default))
        config_path = self._write_config({"limit": 99})

        settings = load_settings(environ={"GH_COPILOT_CONFIG": config_path})

        assert settings.limit == 99

    def test_explicit_missing_file_raises_error(self):
        """Test that a missing explicit file is an error."""
        with pytest.raises(ConfigurationError, match="Config file not found"):
            find_config_file(os.path.join(self.temp_dir, "nope.yaml"), environ={})

    def test_env_missing_file_raises_error(self):
        """Test that a missing GH_COPILOT_CONFIG file is an error."""
        missing = os.path.join(self.temp_dir, "nope.yaml")
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_settings(environ={"GH_COPILOT_CONFIG": missing})

    def test_invalid_yaml_raises_error(self):
        """Test that invalid YAML raises ConfigurationError."""
        config_path = os.path.join(self.temp_dir, "invalid.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write("plan: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_settings(config_path, environ={})

    def test_non_mapping_raises_error(self):
        """Test that a top-level list is rejected."""
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_settings(self._write_config(["plan", "pro"]), environ={})

    def test_unknown_top_level_keys_raise_error(self):
        """Test that unknown top-level keys raise error."""
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            load_settings(self._write_config({"plan": "pro", "colour": "red"}), environ={})

    def test_unknown_statusbar_keys_raise_error(self):
        """Test that unknown statusbar keys raise error."""
        config_path = self._write_config({"statusbar": {"interval": 5}})
        with pytest.raises(ConfigurationError, match="Unknown keys in statusbar"):
            load_settings(config_path, environ={})

    def test_unknown_plan_raises_error(self):
        """Test that a config-file plan is validated like a CLI plan."""
        with pytest.raises(ConfigurationError, match='Unknown plan "gold"'):
            load_settings(self._write_config({"plan": "gold"}), environ={})

    @pytest.mark.parametrize("config_data,message", [
        ({"limit": 0}, "'limit' must be a positive integer"),
        ({"limit": -3}, "'limit' must be a positive integer"),
        ({"limit": "300"}, "'limit' must be a positive integer"),
        ({"limit": True}, "'limit' must be a positive integer"),
        ({"plan": 3}, "'plan' must be a string"),
        ({"gh_path": ""}, "'gh_path' must be a non-empty string"),
        ({"timeout": 0}, "'timeout' must be > 0"),
        ({"statusbar": []}, "'statusbar' must be a dictionary"),
        ({"statusbar": {"command": []}}, "'statusbar.command' must be"),
        ({"statusbar": {"command": ["i3status", 1]}}, "'statusbar.command' must be"),
        ({"statusbar": {"refresh_interval": -1}}, "'statusbar.refresh_interval' must be > 0"),
    ])
    def test_invalid_values_raise_error(self, config_data, message):
        """Test that invalid values are rejected with a clear message."""
        with pytest.raises(ConfigurationError, match=message):
            load_settings(self._write_config(config_data), environ={})

    def test_settings_are_immutable(self):
        """Test that settings cannot be modified after loading."""
        settings = Settings()
        with pytest.raises(AttributeError):
            settings.plan = "pro"
