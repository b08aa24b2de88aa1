"""Command file parser."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from actrun.models.command import CommandFile, RunConfig


class ParseError(Exception):
    """Error parsing command file."""

    pass


class CommandParser:
    """Parse YAML/JSON command files into CommandFile objects.

    Records are kept raw; decoding them into actions is the decoder's job.
    """

    @classmethod
    def parse(cls, path: Path) -> CommandFile:
        """Parse a command file.

        Args:
            path: Path to YAML or JSON file

        Returns:
            Parsed CommandFile

        Raises:
            ParseError: If file is invalid
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ParseError(f"Command file not found: {path}")
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}")

        if data is None:
            raise ParseError("Command file is empty")

        if not isinstance(data, dict):
            raise ParseError("Command file must be a mapping")

        return CommandFile(
            config=cls._parse_config(data.get("config") or {}),
            commands=cls._parse_commands(data.get("commands")),
            path=str(path),
        )

    @classmethod
    def _parse_config(cls, data: Any) -> RunConfig:
        if not isinstance(data, dict):
            raise ParseError("config must be a mapping")

        stop_on_failure = data.get("stop_on_failure")
        if stop_on_failure is not None and not isinstance(stop_on_failure, bool):
            raise ParseError(f"config.stop_on_failure must be a boolean: {stop_on_failure!r}")

        return RunConfig(device=data.get("device"), stop_on_failure=stop_on_failure)

    @classmethod
    def _parse_commands(cls, data: Any) -> list[dict[str, Any]]:
        if not data:
            raise ParseError("Missing required field: commands")
        if not isinstance(data, list):
            raise ParseError("commands must be a list")

        for number, command in enumerate(data, 1):
            if not isinstance(command, dict):
                raise ParseError(f"Command {number} must be a mapping: {command!r}")
        return data
