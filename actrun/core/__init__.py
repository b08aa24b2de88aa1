"""Core modules for actrun."""

from actrun.core.config import ActrunConfig, ConfigLoader, TimeoutConfig
from actrun.core.decoder import CommandDecoder
from actrun.core.device_controller import AdbBackend
from actrun.core.element_resolver import UiHierarchyResolver
from actrun.core.executor import ActionExecutor
from actrun.core.expectation import Expectation, build_condition
from actrun.core.parser import CommandParser, ParseError
from actrun.core.registry import ActionDescriptor, ActionRegistry
from actrun.core.runner import CommandResult, CommandRunner, RunResult
from actrun.core.scroll import ScrollHandler, ScrollLoop

__all__ = [
    "ActionDescriptor",
    "ActionExecutor",
    "ActionRegistry",
    "ActrunConfig",
    "AdbBackend",
    "CommandDecoder",
    "CommandParser",
    "CommandResult",
    "CommandRunner",
    "ConfigLoader",
    "Expectation",
    "ParseError",
    "RunResult",
    "ScrollHandler",
    "ScrollLoop",
    "TimeoutConfig",
    "UiHierarchyResolver",
    "build_condition",
]
