"""Orchestration core: registry, execution context, executor, audit trail, events.

Design overview
---------------

The core composes unrelated capability providers into ordered, auditable
workflow executions without knowing what any provider does.

- ``CapabilityRegistry`` stores named, versioned providers.
- ``ExecutionContext`` carries config, shared state, logging and metrics sinks
  (and, inside a workflow run, the run's ``StepRecorder``).
- ``WorkflowExecutor`` runs workflows by name and converts failures into a
  uniform ``WorkflowResult``.
- ``EventChannel`` publishes lifecycle events for observers.

Typical usage
-------------

Most applications should go through ``AgentInstance``:

1. Construct it with an ``AgentConfig``.
2. ``await register_provider(...)`` for each provider; ``register_workflow(...)``.
3. ``await execute_workflow(name, payload)`` and branch on ``result.success``.
4. ``await cleanup()`` (or use ``async with``).
"""

from .agent import AgentInstance
from .capabilities import CapabilityProvider, CapabilityRegistry, ExecutionContext
from .errors import BioAgentsError, InitializationError, NotFoundError, ProviderExecutionError
from .events import EventChannel
from .factory import create_agent
from .metrics import InMemoryMetricsCollector, LoggingMetricsCollector, MetricsCollector
from .runtime import StepRecorder, WorkflowExecutor
from .schemas.domain import (
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
    "AgentInstance",
    "BioAgentsError",
    "CapabilityProvider",
    "CapabilityRegistry",
    "EventChannel",
    "ExecutionContext",
    "InMemoryMetricsCollector",
    "InitializationError",
    "LoggingMetricsCollector",
    "MetricsCollector",
    "NotFoundError",
    "ProviderExecutionError",
    "ProviderInfo",
    "ProviderName",
    "StepRecord",
    "StepRecorder",
    "WorkflowExecutor",
    "WorkflowMetrics",
    "WorkflowName",
    "WorkflowResult",
    "create_agent",
]
