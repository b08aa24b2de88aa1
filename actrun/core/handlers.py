"""Per-kind action handlers.

Most handlers only implement the synchronous perform(); the default
perform_async() calls it and completes immediately. Handlers that own their
asynchronous path (scroll with a condition, attribute retrieval) override
perform_async() instead.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any

from actrun.core.backend import CompletionHandler, UIBackend
from actrun.errors import AssertionFailure, ProtocolViolation, require
from actrun.models.action import Action

SWIPE_DIRECTIONS = {
    "up": (0.0, -1.0),
    "down": (0.0, 1.0),
    "left": (-1.0, 0.0),
    "right": (1.0, 0.0),
}

SCROLL_EDGES = {
    "top": (0.0, -1.0),
    "bottom": (0.0, 1.0),
    "left": (-1.0, 0.0),
    "right": (1.0, 0.0),
}

# Speed label -> velocity. Each gesture family has its own calibration.
SWIPE_VELOCITIES = {"slow": 0.5, "fast": 1.0}
PINCH_VELOCITIES = {"slow": 1.0, "fast": 2.0}
LEGACY_PINCH_VELOCITIES = {"slow": 1.0, "fast": 2.0}

LEGACY_PINCH_SCALES = {"inward": 0.75, "outward": 1.5}

DEFAULT_LONG_PRESS_DURATION = 1.0  # seconds


def lookup(table: dict[str, Any], key: str, what: str) -> Any:
    """Map an enumeration string through table, unknown values are fatal."""
    try:
        return table[key]
    except KeyError:
        raise ProtocolViolation(f"Unknown {what}: {key!r}") from None


class ActionHandler:
    """Execution contract shared by every action kind."""

    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        raise NotImplementedError(f"perform() not implemented for {type(self).__name__}")

    async def perform_async(
        self,
        action: Action,
        backend: UIBackend,
        on_complete: CompletionHandler,
    ) -> None:
        on_complete(self.perform(action, backend), None)

    def __repr__(self) -> str:
        return type(self).__name__


class TapHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        point = action.args.optional_point(0)
        if point is not None:
            backend.tap(action.target, (point.x, point.y))
        else:
            # No params or not a point
            backend.tap(action.target)
        return None


class LongPressHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        # Clients send milliseconds
        millis = action.args.optional_float(0)
        duration = DEFAULT_LONG_PRESS_DURATION if millis is None else millis / 1000.0
        backend.long_press(action.target, duration)
        return None


class MultiTapHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        backend.multi_tap(action.target, action.args.required_int(0))
        return None


class TypeTextHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        backend.type_text(action.target, action.args.required_str(0))
        return None


class ReplaceTextHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        backend.replace_text(action.target, action.args.required_str(0))
        return None


class ClearTextHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        backend.clear_text(action.target)
        return None


class ScrollToEdgeHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        edge = lookup(SCROLL_EDGES, action.args.required_str(0), "scroll edge")
        backend.scroll_to_edge(action.target, edge)
        return None


class SwipeHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        args = action.args
        dx, dy = lookup(SWIPE_DIRECTIONS, args.required_str(0), "swipe direction")

        velocity = SWIPE_VELOCITIES["fast"]
        speed = args.optional_str(1)
        if speed is not None:
            velocity = lookup(SWIPE_VELOCITIES, speed, "swipe speed")

        percentage = args.optional_float(2)
        if percentage is not None:
            # NaN reads as a full-length swipe
            percentage = 1.0 if math.isnan(percentage) else max(0.0, min(percentage, 1.0))
            dx, dy = dx * percentage, dy * percentage

        backend.swipe(action.target, (dx, dy), velocity)
        return None


class PinchHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        args = action.args
        scale = args.required_float(0)
        require(not math.isnan(scale) and scale > 0.0, "Scale must be a real number above 0.0")

        velocity = PINCH_VELOCITIES["fast"]
        speed = args.optional_str(1)
        if speed is not None:
            velocity = lookup(PINCH_VELOCITIES, speed, "pinch speed")

        angle = args.optional_float(2)
        backend.pinch(action.target, scale, velocity, angle if angle is not None else 0.0)
        return None


class LegacyPinchHandler(ActionHandler):
    """Pinch by direction label rather than scale factor."""

    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        args = action.args
        scale = lookup(LEGACY_PINCH_SCALES, args.required_str(0), "pinch direction")

        velocity = LEGACY_PINCH_VELOCITIES["fast"]
        speed = args.optional_str(1)
        if speed is not None:
            velocity = lookup(LEGACY_PINCH_VELOCITIES, speed, "pinch speed")

        angle = args.optional_float(2)
        backend.pinch(action.target, scale, velocity, angle if angle is not None else 0.0)
        return None


class AdjustSliderHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        position = action.args.required_float(0)
        require(
            0.0 <= position <= 1.0,
            "Normalized position must be with values between 0.0 and 1.0",
        )
        backend.adjust_slider(action.target, position)
        return None


class SetPickerHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        column = action.args.required_int(0)
        value = action.args.required_str(1)
        backend.set_picker_column(action.target, column, value)
        return None


# Unicode date pattern field -> strptime directive, longest first
_PATTERN_FIELDS = [
    ("yyyy", "%Y"),
    ("yy", "%y"),
    ("MMMM", "%B"),
    ("MMM", "%b"),
    ("MM", "%m"),
    ("M", "%m"),
    ("dd", "%d"),
    ("d", "%d"),
    ("EEEE", "%A"),
    ("EEE", "%a"),
    ("HH", "%H"),
    ("H", "%H"),
    ("hh", "%I"),
    ("h", "%I"),
    ("mm", "%M"),
    ("m", "%M"),
    ("ss", "%S"),
    ("s", "%S"),
    ("SSS", "%f"),
    ("a", "%p"),
    ("ZZZZZ", "%z"),
    ("Z", "%z"),
    ("xxx", "%z"),
    ("XXX", "%z"),
]
_PATTERN_TOKEN = re.compile(
    "'[^']*'|" + "|".join(re.escape(field) for field, _ in _PATTERN_FIELDS)
)


def date_pattern_to_strptime(pattern: str) -> str:
    """Translate a Unicode date pattern (yyyy-MM-dd) into a strptime format."""
    directives = dict(_PATTERN_FIELDS)
    out: list[str] = []
    pos = 0
    for match in _PATTERN_TOKEN.finditer(pattern):
        out.append(pattern[pos:match.start()].replace("%", "%%"))
        token = match.group(0)
        if token.startswith("'"):
            # Quoted literal, '' is an escaped quote
            out.append(token[1:-1].replace("%", "%%") or "'")
        else:
            out.append(directives[token])
        pos = match.end()
    out.append(pattern[pos:].replace("%", "%%"))
    return "".join(out)


def parse_date(date_string: str, format_string: str) -> datetime | None:
    """Parse date_string with "ISO8601" or a custom Unicode date pattern.

    Returns:
        Parsed datetime, or None if the combination does not parse
    """
    try:
        if format_string == "ISO8601":
            value = date_string
            if value.endswith("Z"):
                value = value[:-1] + "+00:00"
            return datetime.fromisoformat(value)
        return datetime.strptime(date_string, date_pattern_to_strptime(format_string))
    except ValueError:
        return None


class SetDatePickerHandler(ActionHandler):
    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        date_string = action.args.required_str(0)
        format_string = action.args.required_str(1)

        date = parse_date(date_string, format_string)
        if date is None:
            raise AssertionFailure(
                f"Incorrect date format “{format_string}” provided for date string “{date_string}”"
            )

        backend.set_date(action.target, date)
        return None


class GetAttributesHandler(ActionHandler):
    async def perform_async(
        self,
        action: Action,
        backend: UIBackend,
        on_complete: CompletionHandler,
    ) -> None:
        try:
            attributes = dict(backend.attributes(action.target))
        except Exception as e:
            on_complete(None, str(e) or type(e).__name__)
            return
        on_complete(attributes, None)
