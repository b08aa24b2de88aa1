"""Action execution with two error channels."""

from __future__ import annotations

import logging
import time
from typing import Any

from actrun.core.backend import CompletionHandler, UIBackend
from actrun.core.registry import ActionRegistry
from actrun.errors import FatalActionError
from actrun.models.action import Action, ExecutionResult

logger = logging.getLogger("actrun.executor")


class ActionExecutor:
    """Execute decoded actions against a UI backend.

    Fatal errors (protocol and precondition violations) propagate to the
    caller and no completion fires. Any other error raised while performing
    is delivered through the completion callback.
    """

    def __init__(self, backend: UIBackend):
        self._backend = backend

    async def execute(self, action: Action, on_complete: CompletionHandler) -> None:
        """Perform action and report through on_complete exactly once.

        Args:
            action: Decoded action
            on_complete: Called with (payload, None) or (None, error)

        Raises:
            FatalActionError: On protocol or precondition violations
        """
        handler = ActionRegistry.handler_for(action)
        logger.debug("Performing %s via %r", action, handler)

        completed = False

        def complete(payload: dict[str, Any] | None, error: str | None) -> None:
            nonlocal completed
            if completed:
                logger.warning("Ignoring duplicate completion for %s", action.kind.value)
                return
            completed = True
            on_complete(payload, error)

        start = time.time()
        try:
            await handler.perform_async(action, self._backend, complete)
        except FatalActionError:
            logger.error("Fatal error performing %s", action)
            raise
        except Exception as e:
            if completed:
                # Raised by on_complete or after it
                raise
            logger.debug("Reported failure performing %s: %s", action.kind.value, e)
            complete(None, str(e) or type(e).__name__)
        logger.debug("%s finished in %.2fs", action.kind.value, time.time() - start)

    async def run(self, action: Action) -> ExecutionResult:
        """Perform action and return its result instead of calling back."""
        results: list[ExecutionResult] = []

        def collect(payload: dict[str, Any] | None, error: str | None) -> None:
            results.append(ExecutionResult(payload=payload, error=error))

        await self.execute(action, collect)
        if not results:
            raise RuntimeError(f"{action.kind.value} finished without completing")
        return results[0]
