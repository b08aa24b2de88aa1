"""Resolve command targets against the current UI hierarchy."""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol

from actrun.core.ui_element_parser import UIElement
from actrun.errors import ProtocolViolation, ResolutionError

logger = logging.getLogger("actrun.resolver")

PREDICATE_KEY = "predicate"
INDEX_KEY = "atIndex"
PREDICATE_TYPES = ("text", "label", "id", "type")


class HierarchySource(Protocol):
    def dump_hierarchy(self) -> list[UIElement]: ...


def parse_predicate(record: Any) -> tuple[str, str]:
    """Validate a predicate record, returning (type, value).

    Raises:
        ProtocolViolation: If the predicate is missing or malformed
    """
    if not isinstance(record, dict):
        raise ProtocolViolation(f"{PREDICATE_KEY!r} must be a mapping, got {record!r}")
    kind = record.get("type")
    value = record.get("value")
    if kind not in PREDICATE_TYPES:
        raise ProtocolViolation(f"Unknown predicate type: {kind!r}")
    if not isinstance(value, str):
        raise ProtocolViolation(f"Predicate value must be a string, got {value!r}")
    return kind, value


def matches(element: UIElement, kind: str, value: str) -> bool:
    """Check whether element satisfies a (type, value) predicate."""
    if kind == "text":
        return element.text == value
    if kind == "label":
        return element.content_desc == value
    if kind == "id":
        # Full match or partial match (e.g. "digit_1" matches "...id/digit_1")
        resource_id = element.resource_id or ""
        return resource_id == value or resource_id.endswith(f"/{value}")
    # "type": full class name or its last component
    return element.class_name == value or element.class_name.split(".")[-1] == value


def describe_predicate(kind: str, value: str) -> str:
    return f"{kind} “{value}”"


def find_matches(elements: list[UIElement], predicate: Any) -> list[UIElement]:
    kind, value = parse_predicate(predicate)
    return [e for e in elements if matches(e, kind, value)]


class UiHierarchyResolver:
    """Find the element a command's predicate describes, polling until timeout."""

    def __init__(self, source: HierarchySource, timeout: float = 5.0, poll_interval: float = 0.5):
        """Initialize resolver.

        Args:
            source: Provides the current UI hierarchy
            timeout: Seconds to keep polling for a match
            poll_interval: Seconds between hierarchy dumps
        """
        self._source = source
        self._timeout = timeout
        self._poll_interval = poll_interval

    def query(self, predicate: Any) -> list[UIElement]:
        """All elements currently matching predicate (single dump, no wait)."""
        return find_matches(self._source.dump_hierarchy(), predicate)

    def resolve(self, record: dict[str, Any]) -> UIElement:
        """Resolve the element described by record["predicate"] and record["atIndex"].

        Raises:
            ProtocolViolation: Malformed predicate or index
            ResolutionError: No matching element within timeout
        """
        predicate = record.get(PREDICATE_KEY)
        kind, value = parse_predicate(predicate)
        index = record.get(INDEX_KEY)
        if index is not None and (not isinstance(index, int) or isinstance(index, bool)):
            raise ProtocolViolation(f"{INDEX_KEY!r} must be an integer, got {index!r}")

        start = time.time()
        found: list[UIElement] = []
        while True:
            found = self.query(predicate)
            if found and (index is None or 0 <= index < len(found)):
                break
            if time.time() - start >= self._timeout:
                break
            time.sleep(self._poll_interval)

        description = describe_predicate(kind, value)
        if not found:
            raise ResolutionError(f"No elements found matching {description}")
        if index is None:
            if len(found) > 1:
                raise ResolutionError(
                    f"{len(found)} elements found matching {description}; use {INDEX_KEY!r}"
                )
            index = 0
        if not 0 <= index < len(found):
            raise ResolutionError(
                f"Index {index} out of range for {len(found)} elements matching {description}"
            )

        element = found[index]
        logger.debug("Resolved %s -> %s (%.2fs)", description, element, time.time() - start)
        return element
