from __future__ import annotations

from bioagents.agent_core.runtime.recorder import StepRecorder
from bioagents.agent_core.schemas.domain import StepRecord


def test_append_keeps_order_and_values() -> None:
    rec = StepRecorder()
    rec.append("harvest", input={"doi": "x"}, output={"id": "1"}, duration_ms=12.5)
    rec.append("enrich", input=None, output=None)

    steps = rec.steps
    assert [s.step for s in steps] == ["harvest", "enrich"]
    assert steps[0].input == {"doi": "x"}
    assert steps[0].duration_ms == 12.5
    assert steps[1].duration_ms == 0.0
    assert len(rec) == 2


def test_steps_returns_a_copy() -> None:
    rec = StepRecorder()
    rec.append("a")
    snapshot = rec.steps
    snapshot.clear()
    assert len(rec.steps) == 1


def test_duration_is_not_validated() -> None:
    record = StepRecorder().append("odd", duration_ms=-3.0)
    assert isinstance(record, StepRecord)
    assert record.duration_ms == -3.0


def test_each_recorder_has_its_own_execution_id() -> None:
    assert StepRecorder().execution_id != StepRecorder().execution_id
    assert StepRecorder(execution_id="run-1").execution_id == "run-1"
