"""Pydantic schemas shared by the orchestration core."""

from .base import BaseSchema, FrozenSchema
from .domain import (
    AgentEvent,
    AgentEventType,
    ProviderInfo,
    ProviderName,
    StepRecord,
    WorkflowMetrics,
    WorkflowName,
    WorkflowResult,
)

__all__ = [
    "AgentEvent",
    "AgentEventType",
    "BaseSchema",
    "FrozenSchema",
    "ProviderInfo",
    "ProviderName",
    "StepRecord",
    "WorkflowMetrics",
    "WorkflowName",
    "WorkflowResult",
]
