import asyncio
import time

import pytest

from familyhub.core.constants import StepType
from familyhub.core.exceptions import SyncException
from familyhub.services.composite_operation import CompositeOperation


class TestCompositeOperation:
    @pytest.mark.asyncio
    async def test_runs_steps_in_order(self):
        calls = []
        operation = (
            CompositeOperation()
            .add_step(StepType.CUSTOM, lambda: calls.append("a") or "A", name="a")
            .add_step(StepType.CUSTOM, lambda: calls.append("b") or "B", name="b")
        )

        result = await operation.execute()

        assert result.ok is True
        assert result.results == ["A", "B"]
        assert calls == ["a", "b"]

    @pytest.mark.asyncio
    async def test_rolls_back_completed_steps_in_reverse(self):
        rolled_back = []

        def fail():
            raise SyncException("C exploded")

        operation = (
            CompositeOperation()
            .add_step(StepType.CUSTOM, lambda: "A", lambda r: rolled_back.append(r), name="a")
            .add_step(StepType.CUSTOM, lambda: "B", lambda r: rolled_back.append(r), name="b")
            .add_step(StepType.CUSTOM, fail, lambda r: rolled_back.append("C"), name="c")
        )

        result = await operation.execute()

        assert result.ok is False
        assert result.error == "C exploded"
        assert result.failed_step == "c"
        assert result.results == ["A", "B"]
        # The failed step never completed, so it is never compensated
        assert rolled_back == ["B", "A"]

    @pytest.mark.asyncio
    async def test_failing_compensation_does_not_stop_the_others(self):
        rolled_back = []

        def broken_rollback(_):
            raise RuntimeError("cannot undo B")

        def fail():
            raise RuntimeError("boom")

        operation = (
            CompositeOperation()
            .add_step(StepType.CALENDAR, lambda: "A", lambda r: rolled_back.append(r))
            .add_step(StepType.PASSWORD, lambda: "B", broken_rollback)
            .add_step(StepType.DOCUMENT, fail)
        )

        result = await operation.execute()

        assert result.ok is False
        assert result.error == "boom"
        assert result.failed_step == "document"
        assert rolled_back == ["A"]

    @pytest.mark.asyncio
    async def test_plain_step_runs_to_completion_past_the_deadline(self):
        def slow():
            time.sleep(0.05)
            return "done"

        operation = CompositeOperation(step_timeout=0.01).add_step(StepType.TASK, slow)

        result = await operation.execute()

        assert result.ok is True
        assert result.results == ["done"]

    @pytest.mark.asyncio
    async def test_awaitable_steps_and_compensations(self):
        rolled_back = []

        async def forward():
            await asyncio.sleep(0)
            return "async-result"

        async def backward(result):
            rolled_back.append(result)

        async def fail():
            raise RuntimeError("later step failed")

        operation = (
            CompositeOperation()
            .add_step(StepType.CALENDAR, forward, backward)
            .add_step(StepType.TASK, fail)
        )

        result = await operation.execute()

        assert result.ok is False
        assert rolled_back == ["async-result"]

    @pytest.mark.asyncio
    async def test_hanging_step_times_out_and_compensates(self):
        rolled_back = []

        async def hang():
            await asyncio.sleep(10)

        operation = (
            CompositeOperation(step_timeout=0.01)
            .add_step(StepType.CUSTOM, lambda: "A", lambda r: rolled_back.append(r), name="a")
            .add_step(StepType.CALENDAR, hang, name="slow calendar")
        )

        result = await operation.execute()

        assert result.ok is False
        assert result.failed_step == "slow calendar"
        assert "timed out" in result.error
        assert rolled_back == ["A"]

    @pytest.mark.asyncio
    async def test_step_without_backward_is_skipped_on_rollback(self):
        rolled_back = []

        def fail():
            raise RuntimeError("boom")

        operation = (
            CompositeOperation()
            .add_step(StepType.CUSTOM, lambda: "A", lambda r: rolled_back.append(r))
            .add_step(StepType.CUSTOM, lambda: "B")
            .add_step(StepType.CUSTOM, fail)
        )

        await operation.execute()

        assert rolled_back == ["A"]
