"""Action parameter model.

Raw command parameters arrive loosely typed (decoded JSON/YAML). Each raw value
is decoded into exactly one Param variant; actions then read them positionally
through Params accessors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Union

from actrun.errors import ProtocolViolation


@dataclass(frozen=True)
class NumberParam:
    """Floating-point parameter."""

    value: float


@dataclass(frozen=True)
class IntParam:
    """Integer parameter."""

    value: int


@dataclass(frozen=True)
class StringParam:
    """String parameter."""

    value: str


@dataclass(frozen=True)
class PointParam:
    """Point parameter decoded from a map with real-valued x and y."""

    x: float
    y: float


@dataclass(frozen=True)
class MapParam:
    """Generic key-value parameter."""

    value: dict[str, Any]


@dataclass(frozen=True)
class NullParam:
    """Explicit null, read by every optional accessor as absent."""

    value: None = None


Param = Union[NumberParam, IntParam, StringParam, PointParam, MapParam, NullParam]


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid numeric parameter
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def decode_param(raw: Any) -> Param:
    """Decode a single raw value into its Param variant.

    Args:
        raw: Value as received from the transport

    Returns:
        Decoded parameter

    Raises:
        ProtocolViolation: If the value has no parameter variant
    """
    if raw is None:
        return NullParam()
    if isinstance(raw, str):
        return StringParam(raw)
    if _is_number(raw):
        if isinstance(raw, int):
            return IntParam(raw)
        return NumberParam(float(raw))
    if isinstance(raw, dict):
        x, y = raw.get("x"), raw.get("y")
        if len(raw) == 2 and _is_number(x) and _is_number(y):
            return PointParam(float(x), float(y))
        return MapParam(dict(raw))
    raise ProtocolViolation(f"Unsupported parameter value: {raw!r}")


def param_value(param: Param) -> Any:
    """Return the plain Python value carried by a parameter."""
    if isinstance(param, PointParam):
        return {"x": param.x, "y": param.y}
    return param.value


class Params:
    """Ordered, fixed-arity parameter list consumed positionally by an action."""

    def __init__(self, items: list[Param] | None = None):
        self._items: tuple[Param, ...] = tuple(items or ())

    @classmethod
    def decode(cls, raw: Any) -> Params | None:
        """Decode a raw "params" value; None stays None."""
        if raw is None:
            return None
        if not isinstance(raw, list):
            raise ProtocolViolation(f"params must be a list, got {type(raw).__name__}")
        return cls([decode_param(item) for item in raw])

    @classmethod
    def of(cls, *values: Any) -> Params:
        """Build params from plain Python values."""
        return cls([decode_param(v) for v in values])

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Params):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"Params({list(self._items)!r})"

    def get(self, index: int) -> Param | None:
        """Return parameter at index, or None if absent."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def values(self) -> list[Any]:
        """Plain Python values, in order."""
        return [param_value(p) for p in self._items]

    # Optional accessors: absent or mismatched variant -> None

    def optional_float(self, index: int) -> float | None:
        param = self.get(index)
        if isinstance(param, (NumberParam, IntParam)):
            return float(param.value)
        return None

    def optional_int(self, index: int) -> int | None:
        param = self.get(index)
        if isinstance(param, IntParam):
            return param.value
        if isinstance(param, NumberParam) and param.value.is_integer():
            return int(param.value)
        return None

    def optional_str(self, index: int) -> str | None:
        param = self.get(index)
        if isinstance(param, StringParam):
            return param.value
        return None

    def optional_point(self, index: int) -> PointParam | None:
        param = self.get(index)
        if isinstance(param, PointParam):
            return param
        return None

    # Required accessors: absent or mismatched variant -> ProtocolViolation

    def required_float(self, index: int) -> float:
        return self._required(index, self.optional_float(index), "number")

    def required_int(self, index: int) -> int:
        return self._required(index, self.optional_int(index), "integer")

    def required_str(self, index: int) -> str:
        return self._required(index, self.optional_str(index), "string")

    def _required(self, index: int, value: Any, expected: str) -> Any:
        if value is None:
            found = self.get(index)
            detail = "missing" if found is None or isinstance(found, NullParam) else f"got {found!r}"
            raise ProtocolViolation(f"Parameter {index} must be a {expected} ({detail})")
        return value


def nan_if_absent(value: float | None) -> float:
    """Pass absent or NaN values through as NaN."""
    if value is None or math.isnan(value):
        return math.nan
    return value
