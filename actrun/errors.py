"""Exception hierarchy for action decoding and execution.

Two channels are kept apart on purpose:

- FatalActionError subclasses signal a client/protocol bug. They propagate
  out of the executor and abort the run; no completion callback fires.
- Everything else raised while performing an action is a reported failure and
  is delivered through the completion callback as an error message.
"""

from __future__ import annotations


class ActionError(Exception):
    """Base class for all action errors."""

    pass


class FatalActionError(ActionError):
    """Unrecoverable error; never delivered through the completion path."""

    pass


class ProtocolViolation(FatalActionError):
    """Malformed structural input: missing field, wrong fundamental type, unknown enum."""

    pass


class UnknownActionKind(ProtocolViolation):
    """Action kind has no registered handler."""

    def __init__(self, kind: str):
        super().__init__(f"Unknown action kind: {kind!r}")
        self.kind = kind


class PreconditionViolation(FatalActionError):
    """Parameter value outside the range an action accepts."""

    pass


class ResolutionError(ActionError):
    """Target element could not be resolved from the command record."""

    pass


class BackendError(ActionError):
    """UI backend primitive failed."""

    pass


class AssertionFailure(ActionError):
    """Reported assertion failure (e.g. unparsable date)."""

    pass


def require(condition: bool, message: str) -> None:
    """Raise PreconditionViolation with message unless condition holds."""
    if not condition:
        raise PreconditionViolation(message)
