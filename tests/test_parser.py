"""Tests for CommandParser."""

import pytest

from actrun.core.parser import CommandParser, ParseError


class TestCommandParser:
    def test_parses_yaml_file(self, tmp_path):
        command_file = tmp_path / "commands.yaml"
        command_file.write_text("""
config:
  device: emulator-5554
  stop_on_failure: false

commands:
  - action: tap
    predicate: {type: text, value: Login}
  - action: scroll
    params: [200, down]
    predicate: {type: id, value: list}
    while:
      expectation: toBeVisible
      predicate: {type: text, value: Footer}
""")

        result = CommandParser.parse(command_file)

        assert result.config.device == "emulator-5554"
        assert result.config.stop_on_failure is False
        assert len(result.commands) == 2
        assert result.commands[1]["params"] == [200, "down"]
        assert result.commands[1]["while"]["expectation"] == "toBeVisible"
        assert result.path == str(command_file)

    def test_parses_json_file(self, tmp_path):
        command_file = tmp_path / "commands.json"
        command_file.write_text('{"commands": [{"action": "swipe", "params": ["up", "fast", 1.0]}]}')

        result = CommandParser.parse(command_file)

        assert result.config.device is None
        assert result.config.stop_on_failure is None
        assert result.commands == [{"action": "swipe", "params": ["up", "fast", 1.0]}]

    def test_records_are_not_validated(self, tmp_path):
        command_file = tmp_path / "commands.yaml"
        command_file.write_text("commands:\n  - action: fly\n")

        assert CommandParser.parse(command_file).commands == [{"action": "fly"}]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError, match="not found"):
            CommandParser.parse(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        command_file = tmp_path / "empty.yaml"
        command_file.write_text("")

        with pytest.raises(ParseError, match="empty"):
            CommandParser.parse(command_file)

    def test_invalid_yaml(self, tmp_path):
        command_file = tmp_path / "bad.yaml"
        command_file.write_text("commands: [unclosed")

        with pytest.raises(ParseError, match="Invalid YAML"):
            CommandParser.parse(command_file)

    def test_top_level_must_be_mapping(self, tmp_path):
        command_file = tmp_path / "list.yaml"
        command_file.write_text("- action: tap\n")

        with pytest.raises(ParseError, match="mapping"):
            CommandParser.parse(command_file)

    def test_requires_commands(self, tmp_path):
        command_file = tmp_path / "c.yaml"
        command_file.write_text("config: {}\n")

        with pytest.raises(ParseError, match="commands"):
            CommandParser.parse(command_file)

    def test_commands_must_be_mappings(self, tmp_path):
        command_file = tmp_path / "c.yaml"
        command_file.write_text("commands:\n  - tap\n")

        with pytest.raises(ParseError, match="Command 1"):
            CommandParser.parse(command_file)

    def test_stop_on_failure_must_be_boolean(self, tmp_path):
        command_file = tmp_path / "c.yaml"
        command_file.write_text("config:\n  stop_on_failure: maybe\ncommands:\n  - action: tap\n")

        with pytest.raises(ParseError, match="stop_on_failure"):
            CommandParser.parse(command_file)
