"""Expectations used as scroll-loop conditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from actrun.core.element_resolver import PREDICATE_KEY, describe_predicate, parse_predicate
from actrun.core.ui_element_parser import UIElement
from actrun.errors import ProtocolViolation

EXPECTATION_KEY = "expectation"

# expectation -> (check on matching elements, failure wording)
_CHECKS: dict[str, tuple[Callable[[list[UIElement]], bool], str]] = {
    "toBeVisible": (lambda found: any(e.is_visible() for e in found), "is not visible"),
    "toBeNotVisible": (lambda found: not any(e.is_visible() for e in found), "is visible"),
    "toExist": (lambda found: bool(found), "does not exist"),
    "toNotExist": (lambda found: not found, "exists"),
}


@dataclass(frozen=True)
class Expectation:
    """Condition over the elements matching a predicate."""

    name: str
    predicate: dict[str, Any]
    query: Callable[[Any], list[UIElement]]

    def evaluate(self) -> str | None:
        """Return None when the expectation holds, else a failure description."""
        check, failure = _CHECKS[self.name]
        if check(self.query(self.predicate)):
            return None
        kind, value = parse_predicate(self.predicate)
        return f"Element matching {describe_predicate(kind, value)} {failure}"


def build_condition(record: dict[str, Any], query: Callable[[Any], list[UIElement]]) -> Expectation:
    """Decode a "while" record into an Expectation.

    Args:
        record: {"expectation": name, "predicate": {...}}
        query: Returns elements currently matching a predicate

    Raises:
        ProtocolViolation: Unknown expectation or malformed predicate
    """
    name = record.get(EXPECTATION_KEY)
    if name not in _CHECKS:
        raise ProtocolViolation(f"Unknown expectation: {name!r}")
    predicate = record.get(PREDICATE_KEY)
    parse_predicate(predicate)
    return Expectation(name=name, predicate=predicate, query=query)
