"""
Saga-style composite operations.

Steps run in registration order. When one fails, the compensations of the
steps that completed run in reverse order; a failing compensation is logged
and the remaining ones still run.

Only awaitable steps run under the step deadline. Plain callables run inline
and to completion.
"""
import inspect
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from familyhub.core.config import settings
from familyhub.core.constants import StepType
from familyhub.core.exceptions import BusinessException
from familyhub.core.logging import get_request_logger
from familyhub.utils.timeout import with_timeout


@dataclass
class Step:
    type: StepType
    forward: Callable[[], Any]
    backward: Optional[Callable[[Any], Any]] = None
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.type.value


@dataclass
class CompositeResult:
    ok: bool
    results: List[Any] = field(default_factory=list)
    error: Optional[str] = None
    failed_step: Optional[str] = None


class CompositeOperation:
    def __init__(self, request_id: Optional[str] = None, step_timeout: Optional[float] = None):
        self.request_id = request_id or str(uuid.uuid4())
        self.step_timeout = settings.SYNC_STEP_TIMEOUT if step_timeout is None else step_timeout
        self.steps: List[Step] = []
        self.completed: List[Tuple[Step, Any]] = []
        self.logger = get_request_logger(__name__, self.request_id)

    def add_step(
        self,
        type: StepType,
        forward: Callable[[], Any],
        backward: Optional[Callable[[Any], Any]] = None,
        name: Optional[str] = None,
    ) -> "CompositeOperation":
        self.steps.append(Step(type=type, forward=forward, backward=backward, name=name))
        return self

    async def _run(self, call: Callable[..., Any], *args: Any, label: str) -> Any:
        result = call(*args)
        if inspect.isawaitable(result):
            result = await with_timeout(
                result, self.step_timeout, error_message=f"{label} step timed out"
            )
        return result

    async def execute(self) -> CompositeResult:
        self.logger.info(f"Starting composite operation with {len(self.steps)} steps")
        self.completed = []
        results: List[Any] = []

        for step in self.steps:
            try:
                self.logger.info(f"Executing {step.label} step")
                result = await self._run(step.forward, label=step.label)
            except Exception as e:
                self.logger.error(f"Step {step.label} failed, starting rollback: {e}")
                await self.rollback()
                message = e.message if isinstance(e, BusinessException) else str(e)
                return CompositeResult(
                    ok=False,
                    results=results,
                    error=message or "Operation failed",
                    failed_step=step.label,
                )
            self.completed.append((step, result))
            results.append(result)

        self.logger.info("Composite operation completed successfully")
        return CompositeResult(ok=True, results=results)

    async def rollback(self) -> None:
        self.logger.info(f"Rolling back {len(self.completed)} steps")
        for step, result in reversed(self.completed):
            if step.backward is None:
                continue
            try:
                self.logger.info(f"Rolling back {step.label} step")
                await self._run(step.backward, result, label=f"{step.label} rollback")
            except Exception as e:
                # Keep compensating the remaining steps
                self.logger.error(f"Rollback failed for {step.label}: {e}", exc_info=True)
        self.completed = []
