from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field

from .base import BaseSchema, FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProviderName(str, Enum):
    """Well-known provider names the concrete pipeline depends on.

    The registry itself is keyed by plain strings; these constants are a typed
    façade over that string API.
    """

    dataverse_harvester = "dataverse-harvester"
    metadata_enricher = "metadata-enricher"
    did_issuer = "did-issuer"


class WorkflowName(str, Enum):
    harvest_enrich_issue = "harvest-enrich-issue"
    test_harvest = "test-harvest"
    test_enrichment = "test-enrichment"
    test_did_issuance = "test-did-issuance"


class AgentEventType(str, Enum):
    provider_registered = "provider:registered"
    workflow_registered = "workflow:registered"
    workflow_started = "workflow:started"
    workflow_completed = "workflow:completed"
    workflow_failed = "workflow:failed"


class ProviderInfo(FrozenSchema):
    name: str
    version: str
    description: str = ""


class StepRecord(FrozenSchema):
    """One entry of an execution's audit trail.

    ``duration_ms`` is whatever the workflow body reported; nothing validates it.
    """

    step: str
    timestamp: datetime = Field(default_factory=_utc_now)
    input: Any = None
    output: Any = None
    duration_ms: float = 0.0


class WorkflowMetrics(BaseSchema):
    duration_ms: float
    steps_completed: int
    total_steps: int


class WorkflowResult(BaseSchema):
    """Uniform, non-throwing outcome of ``execute_workflow``.

    Exactly one of ``output`` (on success) or ``error`` (on failure) is meaningful.
    ``audit_trail`` holds whatever steps were appended before the run ended, so
    ``len(audit_trail) == metrics.steps_completed`` always holds.
    """

    success: bool
    output: Any = None
    error: Optional[str] = None
    metrics: WorkflowMetrics
    audit_trail: List[StepRecord] = Field(default_factory=list)

    @classmethod
    def from_trail(
        cls,
        *,
        success: bool,
        trail: List[StepRecord],
        duration_ms: float,
        output: Any = None,
        error: Optional[str] = None,
    ) -> "WorkflowResult":
        steps = list(trail)
        return cls(
            success=success,
            output=output if success else None,
            error=error,
            metrics=WorkflowMetrics(
                duration_ms=duration_ms,
                steps_completed=len(steps),
                total_steps=len(steps),
            ),
            audit_trail=steps,
        )

    @property
    def step_names(self) -> List[str]:
        return [record.step for record in self.audit_trail]


class AgentEvent(FrozenSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    type: AgentEventType
    name: str
    created_at: datetime = Field(default_factory=_utc_now)
    payload: Dict[str, Any] = Field(default_factory=dict)
