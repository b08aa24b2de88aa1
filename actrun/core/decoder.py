"""Decode raw command records into executable actions."""

from __future__ import annotations

import logging
from typing import Any

from actrun.core.backend import ConditionFactory, ElementResolver
from actrun.core.registry import ActionRegistry
from actrun.errors import ProtocolViolation
from actrun.models.action import Action, ActionKind
from actrun.models.params import Params

logger = logging.getLogger("actrun.decoder")

KIND_KEY = "action"
PARAMS_KEY = "params"
WHILE_KEY = "while"

BACKSPACE = "\b"
RETURN = "\n"


class CommandDecoder:
    """Turn a raw command record into a validated Action.

    Only kind, target and the raw parameter sequence are established here.
    Per-kind arity and type checks happen when the action is performed.
    """

    def __init__(self, resolver: ElementResolver, condition_factory: ConditionFactory | None = None):
        """Initialize decoder.

        Args:
            resolver: Resolves the target element from the command record
            condition_factory: Builds conditions from nested "while" records
        """
        self._resolver = resolver
        self._condition_factory = condition_factory

    def decode(self, raw: Any) -> Action:
        """Decode a command record.

        Args:
            raw: Command mapping with at least an "action" key

        Returns:
            Bound action ready to execute

        Raises:
            ProtocolViolation: Malformed record, unknown kind or bad "while" record
            ResolutionError: Target element could not be resolved
        """
        if not isinstance(raw, dict):
            raise ProtocolViolation(f"Command must be a mapping, got {type(raw).__name__}")

        kind = raw.get(KIND_KEY)
        if not isinstance(kind, str):
            raise ProtocolViolation(f"Command is missing a string {KIND_KEY!r} field")

        descriptor = ActionRegistry.resolve(kind)

        # Key kinds type a literal character whatever params were supplied
        if descriptor.kind is ActionKind.TAP_BACKSPACE_KEY:
            params = Params.of(BACKSPACE)
        elif descriptor.kind is ActionKind.TAP_RETURN_KEY:
            params = Params.of(RETURN)
        else:
            params = Params.decode(raw.get(PARAMS_KEY))

        target = self._resolver.resolve(raw)

        condition = None
        if descriptor.kind is ActionKind.SCROLL:
            condition = self._decode_condition(raw.get(WHILE_KEY))

        action = descriptor.bind(target, params, condition)
        logger.debug("Decoded %s", action)
        return action

    def _decode_condition(self, record: Any) -> Any:
        if record is None:
            return None
        if not isinstance(record, dict):
            raise ProtocolViolation(f"{WHILE_KEY!r} must be a mapping, got {type(record).__name__}")
        if self._condition_factory is None:
            raise ProtocolViolation(f"{WHILE_KEY!r} conditions are not supported by this decoder")
        return self._condition_factory(record)
