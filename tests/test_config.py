"""Tests for ConfigLoader."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from actrun.core.config import ConfigLoader, parse_duration


@pytest.fixture(autouse=True)
def no_global_config(tmp_path):
    """Keep the user's ~/.actrun.yaml out of tests."""
    with patch("actrun.core.config.GLOBAL_CONFIG", tmp_path / "missing-global.yaml"):
        yield


class TestConfigLoader:
    """Test ConfigLoader behavior."""

    def test_loads_default_config_when_no_files(self):
        with patch.object(Path, "exists", return_value=False):
            with patch.dict(os.environ, {}, clear=True):
                config = ConfigLoader.load()

        assert config.device is None
        assert config.verbose is False
        assert config.stop_on_failure is True
        assert config.timeouts.command == 60.0
        assert config.timeouts.resolve == 5.0
        assert config.adb.swipe_duration_ms == 300

    def test_project_config_overrides_defaults(self, tmp_path):
        config_file = tmp_path / ".actrun.yaml"
        config_file.write_text("""
device: emulator-5554
stop_on_failure: false
timeouts:
  command: 2m
  resolve: 500ms
adb:
  swipe_duration_ms: 150
""")

        with patch("actrun.core.config.PROJECT_CONFIG", config_file):
            config = ConfigLoader.load()

        assert config.device == "emulator-5554"
        assert config.stop_on_failure is False
        assert config.timeouts.command == 60.0  # "2m" is not a duration, default kept
        assert config.timeouts.resolve == 0.5
        assert config.adb.swipe_duration_ms == 150
        assert config.adb.poll_interval == 0.5  # Still default

    def test_env_var_overrides_config(self, tmp_path):
        config_file = tmp_path / ".actrun.yaml"
        config_file.write_text("device: from-file\ntimeouts:\n  resolve: 3")

        env = {"ACTRUN_DEVICE": "from-env", "ACTRUN_COMMAND_TIMEOUT": "10s"}
        with patch("actrun.core.config.PROJECT_CONFIG", config_file):
            with patch.dict(os.environ, env):
                config = ConfigLoader.load()

        assert config.device == "from-env"
        assert config.timeouts.command == 10.0
        assert config.timeouts.resolve == 3.0  # Merged, not replaced

    def test_verbose_from_env(self, tmp_path):
        with patch("actrun.core.config.PROJECT_CONFIG", tmp_path / "none.yaml"):
            with patch.dict(os.environ, {"ACTRUN_VERBOSE": "yes"}):
                config = ConfigLoader.load()

        assert config.verbose is True

    def test_invalid_yaml_is_ignored(self, tmp_path):
        config_file = tmp_path / ".actrun.yaml"
        config_file.write_text("device: [unclosed")

        with patch("actrun.core.config.PROJECT_CONFIG", config_file):
            with patch.dict(os.environ, {}, clear=True):
                config = ConfigLoader.load()

        assert config.device is None


class TestParseDuration:
    @pytest.mark.parametrize(
        "value,expected",
        [(5, 5.0), ("5s", 5.0), ("500ms", 0.5), ("1.5", 1.5), (None, 9.0), ("soon", 9.0), (True, 9.0)],
    )
    def test_parse_duration(self, value, expected):
        assert parse_duration(value, 9.0) == expected
