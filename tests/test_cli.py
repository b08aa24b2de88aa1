"""Tests for the actrun CLI."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from actrun import __version__
from actrun.cli import app, build_runner
from actrun.core.config import ActrunConfig
from actrun.core.runner import CommandResult, RunResult

runner = CliRunner()


@pytest.fixture
def command_file(tmp_path: Path) -> Path:
    path = tmp_path / "commands.yaml"
    path.write_text("""
config:
  device: emulator-5554
commands:
  - action: getAttributes
    predicate: {type: text, value: Hello}
""")
    return path


@pytest.fixture
def config():
    with patch("actrun.core.config.ConfigLoader.load", return_value=ActrunConfig()) as load:
        yield load.return_value


def run_result(status: str) -> RunResult:
    command = CommandResult(
        index=1,
        action="getAttributes",
        status=status,
        duration=0.1,
        error=None if status == "passed" else "boom",
        payload={"text": "Hello"} if status == "passed" else None,
    )
    return RunResult(name="commands.yaml", status=status, duration=0.1, commands=[command])


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestKindsCommand:
    def test_lists_registered_kinds(self):
        result = runner.invoke(app, ["kinds"])

        assert result.exit_code == 0
        assert "setDatePickerDate" in result.output
        assert "LegacyPinchHandler" in result.output


class TestDevicesCommand:
    def test_lists_devices(self):
        devices = [{"id": "emulator-5554", "name": "Pixel 7", "status": "device"}]
        with patch("actrun.core.device_controller.AdbBackend.list_devices", return_value=devices):
            result = runner.invoke(app, ["devices"])

        assert result.exit_code == 0
        assert "emulator-5554" in result.output

    def test_no_devices(self):
        with patch("actrun.core.device_controller.AdbBackend.list_devices", return_value=[]):
            result = runner.invoke(app, ["devices"])

        assert result.exit_code == 1
        assert "No devices found" in result.output


class TestRunCommand:
    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["run", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 2
        assert "not found" in result.output

    def test_parse_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("commands: []\n")

        result = runner.invoke(app, ["run", str(path)])

        assert result.exit_code == 2
        assert "Parse error" in result.output

    def test_passing_run_writes_json(self, command_file, config, tmp_path):
        mock_runner = MagicMock()
        mock_runner.run_file.return_value = run_result("passed")
        out = tmp_path / "out" / "results.json"

        with patch("actrun.cli.build_runner", return_value=mock_runner) as build:
            result = runner.invoke(app, ["run", str(command_file), "--json", str(out)])

        assert result.exit_code == 0
        assert build.call_args.args[0].device == "emulator-5554"
        data = json.loads(out.read_text())
        assert data["status"] == "passed"
        assert data["commands"][0]["payload"] == {"text": "Hello"}

    def test_device_option_overrides_file(self, command_file, config):
        mock_runner = MagicMock()
        mock_runner.run_file.return_value = run_result("passed")

        with patch("actrun.cli.build_runner", return_value=mock_runner) as build:
            runner.invoke(app, ["run", str(command_file), "--device", "other"])

        assert build.call_args.args[0].device == "other"

    @pytest.mark.parametrize("status,exit_code", [("failed", 1), ("error", 2)])
    def test_exit_codes(self, command_file, config, status, exit_code):
        mock_runner = MagicMock()
        mock_runner.run_file.return_value = run_result(status)

        with patch("actrun.cli.build_runner", return_value=mock_runner):
            result = runner.invoke(app, ["run", str(command_file)])

        assert result.exit_code == exit_code
        assert "boom" in result.output

    def test_no_device_available(self, tmp_path, config):
        path = tmp_path / "c.yaml"
        path.write_text("commands:\n  - action: tap\n")

        with patch("actrun.core.device_controller.AdbBackend.list_devices", return_value=[]):
            result = runner.invoke(app, ["run", str(path)])

        assert result.exit_code == 2
        assert "No devices found" in result.output


class TestBuildRunner:
    def test_wires_config_into_runner(self):
        config = ActrunConfig(device="emulator-5554")
        config.timeouts.command = 12.0

        command_runner = build_runner(config)

        assert command_runner._timeout == 12.0
        assert command_runner._stop_on_failure is True
