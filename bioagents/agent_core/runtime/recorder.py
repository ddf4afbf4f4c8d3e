from __future__ import annotations

"""Execution-scoped audit trail recorder.

``WorkflowExecutor`` creates one ``StepRecorder`` per ``execute`` call and
hands it to the workflow through a derived ``ExecutionContext``. Recorders are
never shared between runs, so concurrent executions cannot see each other's
steps.

Appending is explicit: the executor does not instrument provider calls, so a
workflow body that does not call ``append_step`` after a stage leaves that
stage out of the trail.
"""

from typing import Any, List, Optional
from uuid import uuid4

from ..schemas.domain import StepRecord


class StepRecorder:
    """Append-only list of ``StepRecord`` entries for one workflow run."""

    def __init__(self, execution_id: Optional[str] = None) -> None:
        self.execution_id = execution_id or str(uuid4())
        self._steps: List[StepRecord] = []

    def append(
        self,
        step: str,
        *,
        input: Any = None,
        output: Any = None,
        duration_ms: Optional[float] = None,
    ) -> StepRecord:
        """
        Append one step record.

        Args:
            step: Step name.
            input: What the stage consumed.
            output: What the stage produced.
            duration_ms: Caller-measured duration; ``None`` is stored as ``0``.
                The value is advisory and not validated.

        Returns:
            The stored, immutable ``StepRecord``.
        """
        record = StepRecord(
            step=step,
            input=input,
            output=output,
            duration_ms=float(duration_ms or 0.0),
        )
        self._steps.append(record)
        return record

    @property
    def steps(self) -> List[StepRecord]:
        """A copy of the trail in append order."""
        return list(self._steps)

    def __len__(self) -> int:
        return len(self._steps)
