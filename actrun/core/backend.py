"""Collaborator interfaces consumed by the action core.

The core never looks inside a target; it only hands it back to the backend
that produced it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional, Protocol

# Completion callback: (payload, error). Exactly one of the two is set, or both
# are None for a successful action without payload.
CompletionHandler = Callable[[Optional[dict[str, Any]], Optional[str]], None]


class Condition(Protocol):
    """Predicate re-evaluated by the scroll loop."""

    def evaluate(self) -> str | None:
        """Return None when satisfied, or a failure description."""
        ...


class ConditionFactory(Protocol):
    def __call__(self, record: dict[str, Any]) -> Condition: ...


class ElementResolver(Protocol):
    def resolve(self, record: dict[str, Any]) -> Any:
        """Resolve the target described by a command record.

        Raises:
            ResolutionError: If no element matches
        """
        ...


class UIBackend(Protocol):
    """Primitive UI operations. Each may raise; failures are reported, not fatal."""

    def tap(self, target: Any, point: tuple[float, float] | None = None) -> None: ...

    def long_press(self, target: Any, duration: float) -> None: ...

    def multi_tap(self, target: Any, taps: int) -> None: ...

    def type_text(self, target: Any, text: str) -> None: ...

    def replace_text(self, target: Any, text: str) -> None: ...

    def clear_text(self, target: Any) -> None: ...

    def scroll(
        self,
        target: Any,
        offset: tuple[float, float],
        normalized_start: tuple[float, float],
    ) -> None: ...

    def scroll_to_edge(self, target: Any, edge: tuple[float, float]) -> None: ...

    def swipe(self, target: Any, normalized_offset: tuple[float, float], velocity: float) -> None: ...

    def pinch(self, target: Any, scale: float, velocity: float, angle: float) -> None: ...

    def adjust_slider(self, target: Any, position: float) -> None: ...

    def set_picker_column(self, target: Any, column: int, value: str) -> None: ...

    def set_date(self, target: Any, date: datetime) -> None: ...

    def attributes(self, target: Any) -> dict[str, Any]: ...
