"""Command file data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RunConfig:
    """Command file config section."""

    device: str | None = None
    stop_on_failure: bool | None = None


@dataclass
class CommandFile:
    """Parsed command file: an ordered list of raw command records."""

    config: RunConfig = field(default_factory=RunConfig)
    commands: list[dict[str, Any]] = field(default_factory=list)
    path: str | None = None
