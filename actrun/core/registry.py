"""Action kind registry."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from actrun.core import handlers
from actrun.core.backend import Condition
from actrun.core.scroll import ScrollHandler
from actrun.errors import UnknownActionKind
from actrun.models.action import Action, ActionKind
from actrun.models.params import Params


@dataclass(frozen=True)
class ActionDescriptor:
    """Registry entry: the handler that executes one action kind."""

    kind: ActionKind
    handler: handlers.ActionHandler

    def bind(
        self,
        target: Any,
        params: Params | None,
        condition: Condition | None = None,
    ) -> Action:
        """Construct an executable action of this kind."""
        return Action(kind=self.kind, target=target, params=params, condition=condition)


_type_text = handlers.TypeTextHandler()

_HANDLERS: dict[ActionKind, handlers.ActionHandler] = {
    ActionKind.TAP: handlers.TapHandler(),
    ActionKind.LONG_PRESS: handlers.LongPressHandler(),
    ActionKind.MULTI_TAP: handlers.MultiTapHandler(),

    ActionKind.TAP_BACKSPACE_KEY: _type_text,
    ActionKind.TAP_RETURN_KEY: _type_text,
    ActionKind.TYPE_TEXT: _type_text,
    ActionKind.REPLACE_TEXT: handlers.ReplaceTextHandler(),
    ActionKind.CLEAR_TEXT: handlers.ClearTextHandler(),

    ActionKind.SCROLL: ScrollHandler(),
    ActionKind.SCROLL_TO: handlers.ScrollToEdgeHandler(),

    ActionKind.SWIPE: handlers.SwipeHandler(),
    ActionKind.PINCH: handlers.PinchHandler(),
    ActionKind.PINCH_WITH_ANGLE: handlers.LegacyPinchHandler(),

    ActionKind.ADJUST_SLIDER_TO_POSITION: handlers.AdjustSliderHandler(),

    ActionKind.SET_COLUMN_TO_VALUE: handlers.SetPickerHandler(),
    ActionKind.SET_DATE_PICKER_DATE: handlers.SetDatePickerHandler(),

    ActionKind.GET_ATTRIBUTES: handlers.GetAttributesHandler(),
}


class ActionRegistry:
    """Read-only lookup from kind identifier to action descriptor."""

    _entries: Mapping[str, ActionDescriptor] = MappingProxyType({
        kind.value: ActionDescriptor(kind, handler) for kind, handler in _HANDLERS.items()
    })

    @classmethod
    def resolve(cls, kind: str | ActionKind) -> ActionDescriptor:
        """Look up the descriptor for kind.

        Raises:
            UnknownActionKind: If kind has no registered entry
        """
        key = kind.value if isinstance(kind, ActionKind) else kind
        try:
            return cls._entries[key]
        except (KeyError, TypeError):
            raise UnknownActionKind(str(kind)) from None

    @classmethod
    def kinds(cls) -> list[str]:
        """Registered kind identifiers, in registration order."""
        return list(cls._entries)

    @classmethod
    def handler_for(cls, action: Action) -> handlers.ActionHandler:
        return cls.resolve(action.kind).handler
