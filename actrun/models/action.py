"""Action and execution result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from actrun.models.params import Params, param_value

if TYPE_CHECKING:
    from actrun.core.backend import Condition


class ActionKind(str, Enum):
    """Every action kind a command may name."""

    TAP = "tap"
    LONG_PRESS = "longPress"
    MULTI_TAP = "multiTap"

    TAP_BACKSPACE_KEY = "tapBackspaceKey"
    TAP_RETURN_KEY = "tapReturnKey"
    TYPE_TEXT = "typeText"
    REPLACE_TEXT = "replaceText"
    CLEAR_TEXT = "clearText"

    SCROLL = "scroll"
    SCROLL_TO = "scrollTo"

    SWIPE = "swipe"
    PINCH = "pinch"
    PINCH_WITH_ANGLE = "pinchWithAngle"  # Legacy pinch

    ADJUST_SLIDER_TO_POSITION = "adjustSliderToPosition"

    SET_COLUMN_TO_VALUE = "setColumnToValue"
    SET_DATE_PICKER_DATE = "setDatePickerDate"

    GET_ATTRIBUTES = "getAttributes"


@dataclass(frozen=True)
class Action:
    """A decoded, executable action.

    Constructed once by the decoder, executed once, then discarded. Only
    scroll actions carry a condition.
    """

    kind: ActionKind
    target: Any
    params: Params | None = None
    condition: Condition | None = None

    @property
    def args(self) -> Params:
        """Parameters, empty when the command supplied none."""
        return self.params if self.params is not None else Params()

    def __str__(self) -> str:
        params_description = ""
        if self.params is not None:
            parts = [repr(param_value(param)) for param in self.params]
            params_description = f"({', '.join(parts)})"
        return f"{self.kind.value.upper()}{params_description} WITH {self.target}"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one action: a payload or an error, never both."""

    payload: dict[str, Any] | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.payload is not None and self.error is not None:
            raise ValueError("ExecutionResult cannot carry both payload and error")

    @property
    def succeeded(self) -> bool:
        return self.error is None
