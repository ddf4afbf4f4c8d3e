from __future__ import annotations

"""Workflow execution runtime.

``WorkflowExecutor`` owns the workflow table of an agent instance and runs
workflows by name.

Execution model
---------------

For every ``execute`` call the executor:

1. Resolves the workflow name; an unknown name fails the call before any
   audit entry exists.
2. Creates a fresh ``StepRecorder`` and derives an ``ExecutionContext`` that
   carries it. ``config`` and ``state`` stay the shared objects.
3. Awaits the workflow function with ``(payload, derived_ctx)`` and measures
   wall-clock duration.
4. Emits ``workflow:started`` and ``workflow:completed`` / ``workflow:failed``.

Result conversion
-----------------

Whatever the workflow function does, ``execute`` returns a ``WorkflowResult``.
An ``Exception`` raised by the workflow (or by any provider it calls) becomes
``success=False`` with the error description and the partial audit trail.
Nothing produced by stages before the failure is surfaced as output.

There is no executor-level timeout, retry or lock: stages are ordered only by
the data dependencies inside the workflow body, and concurrent runs share the
registry and the context ``state``.
"""

import inspect
import logging
import time
from typing import Any, Dict, List, Optional

from ..capabilities.base import ExecutionContext
from ..capabilities.registry import NameLike, normalize_name
from ..errors import NotFoundError
from ..events import EventChannel
from ..schemas.domain import AgentEventType, WorkflowResult
from .models import WorkflowDefinition, WorkflowFn
from .recorder import StepRecorder

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def describe_error(exc: BaseException) -> str:
    """Non-empty, human readable description of an exception."""
    text = str(exc).strip()
    return text or exc.__class__.__name__


class WorkflowExecutor:
    """Register and run named workflows with timing, auditing and error-to-result conversion."""

    def __init__(self, *, context: ExecutionContext, events: EventChannel) -> None:
        """
        Initialize the executor.

        Args:
            context: The agent's shared execution context; per-run contexts are derived from it.
            events: Channel receiving workflow lifecycle events.
        """
        self._context = context
        self._events = events
        self._workflows: Dict[str, WorkflowDefinition] = {}

    def register(self, name: NameLike, fn: WorkflowFn) -> None:
        """Store ``fn`` under ``name``, replacing any existing workflow with that name."""
        key = normalize_name(name)
        if key in self._workflows:
            logger.info(f"Replacing workflow: {key}")
        self._workflows[key] = WorkflowDefinition(name=key, fn=fn)
        logger.info(f"Workflow registered: {key}")
        self._events.emit(AgentEventType.workflow_registered, key)

    def get(self, name: NameLike) -> Optional[WorkflowDefinition]:
        return self._workflows.get(normalize_name(name))

    def names(self) -> List[str]:
        return list(self._workflows)

    def clear(self) -> None:
        self._workflows.clear()

    async def execute(self, name: NameLike, payload: Any = None) -> WorkflowResult:
        """Run a workflow and return its ``WorkflowResult``.

        Never raises for errors originating in the workflow or its providers.
        """
        key = normalize_name(name)
        start = time.perf_counter()
        recorder = StepRecorder()

        try:
            definition = self._workflows.get(key)
            if definition is None:
                raise NotFoundError(key, kind="workflow")

            logger.info(f"Starting workflow: {key} (execution_id={recorder.execution_id})")
            self._events.emit(
                AgentEventType.workflow_started,
                key,
                {"execution_id": recorder.execution_id},
            )

            run_ctx = self._context.with_recorder(recorder)
            output = definition.fn(payload, run_ctx)
            if inspect.isawaitable(output):
                output = await output
        except Exception as e:
            duration = _elapsed_ms(start)
            error = describe_error(e)
            logger.error(f"Workflow failed: {key}: {error}", exc_info=not isinstance(e, NotFoundError))
            self._context.metrics.timing("workflow.duration", duration)
            self._context.metrics.increment("workflow.failed")
            self._events.emit(
                AgentEventType.workflow_failed,
                key,
                {
                    "execution_id": recorder.execution_id,
                    "error": error,
                    "duration_ms": duration,
                    "success": False,
                },
            )
            return WorkflowResult.from_trail(
                success=False,
                trail=recorder.steps,
                duration_ms=duration,
                error=error,
            )

        duration = _elapsed_ms(start)
        self._context.metrics.timing("workflow.duration", duration)
        self._context.metrics.increment("workflow.completed")
        logger.info(f"Workflow completed: {key} in {duration:.2f}ms with {len(recorder)} step(s)")
        self._events.emit(
            AgentEventType.workflow_completed,
            key,
            {
                "execution_id": recorder.execution_id,
                "duration_ms": duration,
                "success": True,
            },
        )
        return WorkflowResult.from_trail(
            success=True,
            trail=recorder.steps,
            duration_ms=duration,
            output=output,
        )
