from __future__ import annotations

"""Capability provider protocol and the execution context.

A capability provider is a named, versioned unit of work. The core never
looks inside one: it only calls the optional ``initialize`` / ``cleanup``
hooks and the single ``execute`` entry point.

``ExecutionContext`` is what every provider and workflow receives. It bundles:

- the registry (so workflows can reach other providers),
- the immutable ``AgentConfig``,
- a mutable ``state`` mapping shared by everything on one agent instance,
- logging and metrics sinks,
- for a single workflow run only, the ``StepRecorder`` collecting its audit trail.

The ``state`` mapping is not isolated per execution. Concurrent workflows that
write the same key race; callers must pick distinct keys or synchronize.
"""

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, runtime_checkable

from ...core.config import AgentConfig
from ..metrics import MetricsCollector
from ..schemas.domain import StepRecord

if TYPE_CHECKING:
    from ..runtime.recorder import StepRecorder
    from .registry import CapabilityRegistry


@runtime_checkable
class CapabilityProvider(Protocol):
    """Protocol for provider implementations.

    Providers may additionally define ``async def initialize(self, ctx)`` and
    ``async def cleanup(self)``; both hooks are optional and looked up by name.
    """

    name: str
    version: str
    description: str

    async def execute(self, payload: Any, ctx: ExecutionContext) -> Any: ...


@dataclass(frozen=True)
class ExecutionContext:
    """Execution context passed to providers and workflow functions.

    Attributes
    ----------
    registry:
        The ``CapabilityRegistry`` of the owning agent instance.
    config:
        The immutable ``AgentConfig``.
    state:
        Mutable key/value store shared across all executions on the agent.
    logger:
        Logging sink for provider and workflow progress messages.
    metrics:
        Metrics sink (``MetricsCollector``).
    recorder:
        The per-run ``StepRecorder``; ``None`` outside a workflow run.
    """

    registry: CapabilityRegistry
    config: AgentConfig
    state: Dict[str, Any]
    logger: logging.Logger
    metrics: MetricsCollector
    recorder: Optional[StepRecorder] = None

    def with_recorder(self, recorder: StepRecorder) -> ExecutionContext:
        """Derive a context for one workflow run.

        ``config`` and ``state`` are the same objects as in this context, not copies.
        """
        return replace(self, recorder=recorder)

    def append_step(
        self,
        step: str,
        input: Any = None,
        output: Any = None,
        duration_ms: Optional[float] = None,
    ) -> Optional[StepRecord]:
        """Append a step to the current run's audit trail.

        Outside a workflow run there is no trail; the call is a no-op and
        returns ``None``.
        """
        if self.recorder is None:
            self.logger.debug(f"No audit trail in scope, step '{step}' not recorded")
            return None
        return self.recorder.append(step, input=input, output=output, duration_ms=duration_ms)

    def require_provider(self, name: str) -> CapabilityProvider:
        """Look up a provider by name, raising ``NotFoundError`` if missing."""
        return self.registry.require(name)
