"""Scroll action and the scroll-while-condition loop."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

from actrun.core.backend import CompletionHandler, Condition, UIBackend
from actrun.core.handlers import ActionHandler, lookup
from actrun.errors import FatalActionError
from actrun.models.action import Action
from actrun.models.params import nan_if_absent

logger = logging.getLogger("actrun.scroll")


def scroll_offset(direction: str, pixels: float) -> tuple[float, float]:
    """Signed content offset for a scroll direction."""
    offsets = {
        "up": (0.0, pixels),
        "down": (0.0, -pixels),
        "left": (pixels, 0.0),
        "right": (-pixels, 0.0),
    }
    return lookup(offsets, direction, "scroll direction")


def combine_errors(step_error: str, condition_failure: str) -> str:
    """Join a step error and a condition failure into one message."""
    condition_text = condition_failure[:1].lower() + condition_failure[1:]
    return f"{step_error} and {condition_text}"


class LoopState(str, Enum):
    EVALUATING = "evaluating"
    STEPPING = "stepping"
    TERMINATED = "terminated"


class ScrollLoop:
    """Scroll repeatedly while a condition is not yet satisfied.

    EVALUATING -> condition holds -> TERMINATED (success, no step)
    EVALUATING -> condition fails -> STEPPING
    STEPPING   -> step raises     -> TERMINATED (combined error)
    STEPPING   -> step succeeds   -> yield to event loop -> EVALUATING

    There is no iteration cap; callers bound the loop with their own timeout.
    """

    def __init__(
        self,
        backend: UIBackend,
        target: Any,
        offset: tuple[float, float],
        normalized_start: tuple[float, float],
        condition: Condition,
    ):
        self._backend = backend
        self._target = target
        self._offset = offset
        self._normalized_start = normalized_start
        self._condition = condition
        self.state = LoopState.EVALUATING
        self.steps = 0

    async def run(self) -> str | None:
        """Drive the loop to termination.

        Returns:
            None on success, or the combined error message
        """
        condition_failure: str | None = None
        while True:
            if self.state is LoopState.EVALUATING:
                condition_failure = self._condition.evaluate()
                if condition_failure is None:
                    logger.debug("Condition satisfied after %d scroll steps", self.steps)
                    self.state = LoopState.TERMINATED
                    return None
                self.state = LoopState.STEPPING

            elif self.state is LoopState.STEPPING:
                try:
                    self._backend.scroll(self._target, self._offset, self._normalized_start)
                except FatalActionError:
                    raise
                except Exception as e:
                    self.state = LoopState.TERMINATED
                    error = combine_errors(str(e), condition_failure or "")
                    logger.debug("Scroll step %d failed: %s", self.steps + 1, error)
                    return error

                self.steps += 1
                self.state = LoopState.EVALUATING
                await asyncio.sleep(0)

            else:
                raise RuntimeError("Scroll loop already terminated")


class ScrollHandler(ActionHandler):
    """Scroll by a pixel offset, optionally repeating while a condition fails."""

    @staticmethod
    def resolve_geometry(action: Action) -> tuple[tuple[float, float], tuple[float, float]]:
        """Return (offset, normalized start point) for a scroll action."""
        args = action.args
        pixels = args.required_float(0)
        offset = scroll_offset(args.required_str(1), pixels)
        start = (nan_if_absent(args.optional_float(2)), nan_if_absent(args.optional_float(3)))
        return offset, start

    def perform(self, action: Action, backend: UIBackend) -> dict[str, Any] | None:
        offset, start = self.resolve_geometry(action)
        backend.scroll(action.target, offset, start)
        return None

    async def perform_async(
        self,
        action: Action,
        backend: UIBackend,
        on_complete: CompletionHandler,
    ) -> None:
        if action.condition is None:
            on_complete(self.perform(action, backend), None)
            return

        offset, start = self.resolve_geometry(action)
        loop = ScrollLoop(backend, action.target, offset, start, action.condition)
        error = await loop.run()
        on_complete(None, error)
