"""Tests for scroll and the scroll-while-condition loop."""

import math
from unittest.mock import MagicMock

import pytest

from actrun.core.registry import ActionRegistry
from actrun.core.scroll import LoopState, ScrollHandler, ScrollLoop, combine_errors
from actrun.errors import BackendError, PreconditionViolation, ProtocolViolation
from actrun.models.params import Params


class FailingCondition:
    """Condition that fails a fixed number of times, then holds."""

    def __init__(self, failures, message="Element matching text “End” is not visible"):
        self.remaining = failures
        self.message = message
        self.evaluations = 0

    def evaluate(self):
        self.evaluations += 1
        if self.remaining is None:
            return self.message
        if self.remaining > 0:
            self.remaining -= 1
            return self.message
        return None


def scroll_action(*params, condition=None):
    return ActionRegistry.resolve("scroll").bind("T", Params.of(*params), condition)


class Completion:
    """Records completion callbacks."""

    def __init__(self):
        self.calls = []

    def __call__(self, payload, error):
        self.calls.append((payload, error))


@pytest.fixture
def backend():
    return MagicMock()


class TestScrollGeometry:
    @pytest.mark.parametrize(
        "direction,offset",
        [
            ("up", (0.0, 50.0)),
            ("down", (0.0, -50.0)),
            ("left", (50.0, 0.0)),
            ("right", (-50.0, 0.0)),
        ],
    )
    def test_direction_offsets(self, direction, offset):
        resolved, _ = ScrollHandler.resolve_geometry(scroll_action(50, direction))

        assert resolved == offset

    def test_start_point_defaults_to_nan(self):
        _, start = ScrollHandler.resolve_geometry(scroll_action(50, "down"))

        assert math.isnan(start[0]) and math.isnan(start[1])

    def test_start_point_passes_through(self):
        _, start = ScrollHandler.resolve_geometry(scroll_action(50, "down", 0.2, 0.8))

        assert start == (0.2, 0.8)

    def test_nan_start_coordinate_stays_nan(self):
        _, start = ScrollHandler.resolve_geometry(scroll_action(50, "down", math.nan, 0.8))

        assert math.isnan(start[0])
        assert start[1] == 0.8

    def test_unknown_direction_is_fatal(self):
        with pytest.raises(ProtocolViolation, match="scroll direction"):
            ScrollHandler.resolve_geometry(scroll_action(50, "sideways"))


class TestPlainScroll:
    @pytest.mark.asyncio
    async def test_single_step_without_condition(self, backend):
        completion = Completion()

        await ScrollHandler().perform_async(scroll_action(100, "up"), backend, completion)

        backend.scroll.assert_called_once()
        target, offset, _ = backend.scroll.call_args.args
        assert (target, offset) == ("T", (0.0, 100.0))
        assert completion.calls == [(None, None)]


class TestScrollLoop:
    """Tests for the repeat-until-condition state machine."""

    @pytest.mark.asyncio
    async def test_satisfied_condition_performs_no_step(self, backend):
        condition = FailingCondition(0)
        loop = ScrollLoop(backend, "T", (0.0, -50.0), (math.nan, math.nan), condition)

        error = await loop.run()

        assert error is None
        assert loop.state is LoopState.TERMINATED
        backend.scroll.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failures", [1, 3, 7])
    async def test_steps_once_per_condition_failure(self, backend, failures):
        condition = FailingCondition(failures)
        loop = ScrollLoop(backend, "T", (0.0, -50.0), (0.5, 0.5), condition)

        error = await loop.run()

        assert error is None
        assert backend.scroll.call_count == failures
        assert loop.steps == failures
        assert condition.evaluations == failures + 1

    @pytest.mark.asyncio
    async def test_step_failure_combines_errors(self, backend):
        backend.scroll.side_effect = BackendError("Unable to scroll")
        condition = FailingCondition(None, message="Element matching text “End” is not visible")
        loop = ScrollLoop(backend, "T", (0.0, -50.0), (0.5, 0.5), condition)

        error = await loop.run()

        assert error == "Unable to scroll and element matching text “End” is not visible"
        assert backend.scroll.call_count == 1
        assert loop.state is LoopState.TERMINATED

    @pytest.mark.asyncio
    async def test_step_failure_after_progress(self, backend):
        backend.scroll.side_effect = [None, None, BackendError("Reached the edge")]
        loop = ScrollLoop(backend, "T", (0.0, -50.0), (0.5, 0.5), FailingCondition(None, "Not there"))

        error = await loop.run()

        assert error == "Reached the edge and not there"
        assert backend.scroll.call_count == 3

    @pytest.mark.asyncio
    async def test_fatal_step_error_propagates(self, backend):
        backend.scroll.side_effect = PreconditionViolation("bad offset")
        loop = ScrollLoop(backend, "T", (0.0, -50.0), (0.5, 0.5), FailingCondition(None))

        with pytest.raises(PreconditionViolation):
            await loop.run()

    @pytest.mark.asyncio
    async def test_terminated_loop_cannot_rerun(self, backend):
        loop = ScrollLoop(backend, "T", (0.0, -50.0), (0.5, 0.5), FailingCondition(0))
        await loop.run()

        with pytest.raises(RuntimeError):
            await loop.run()

    @pytest.mark.asyncio
    async def test_handler_reports_loop_result(self, backend):
        completion = Completion()
        action = scroll_action(50, "down", condition=FailingCondition(2))

        await ScrollHandler().perform_async(action, backend, completion)

        assert backend.scroll.call_count == 2
        assert completion.calls == [(None, None)]


class TestCombineErrors:
    def test_lowercases_first_letter_only(self):
        assert combine_errors("Step failed", "Element Is Hidden") == "Step failed and element Is Hidden"

    def test_empty_condition_text(self):
        assert combine_errors("Step failed", "") == "Step failed and "
