from __future__ import annotations

"""Agent instance: the public face of the orchestration core.

``AgentInstance`` owns one registry, one shared ``ExecutionContext`` and one
workflow table for its lifetime. It is constructed explicitly, used, and torn
down with ``cleanup`` (or ``async with``); there is no module-level singleton.

Two execution paths with deliberately different error policies:

- ``execute_workflow`` always returns a ``WorkflowResult``. Errors become
  ``success=False``.
- ``execute_provider`` calls a single provider directly and lets its errors
  propagate unchanged. It records timing to the metrics sink but writes no
  audit trail.
"""

import inspect
import logging
import time
from typing import Any, List, Optional

from ..core.config import AgentConfig
from .capabilities.base import CapabilityProvider, ExecutionContext
from .capabilities.registry import CapabilityRegistry, NameLike, normalize_name
from .errors import InitializationError
from .events import EventChannel
from .metrics import LoggingMetricsCollector, MetricsCollector
from .runtime.engine import WorkflowExecutor, describe_error
from .runtime.models import WorkflowFn
from .schemas.domain import AgentEventType, ProviderInfo, WorkflowResult

logger = logging.getLogger(__name__)

CONTEXT_LOGGER_NAME = "bioagents.agent"


class AgentInstance:
    """Register providers and workflows, run them, and tear everything down."""

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        *,
        metrics: Optional[MetricsCollector] = None,
        events: Optional[EventChannel] = None,
        context_logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the agent.

        Args:
            config: Immutable agent configuration; defaults to an empty ``AgentConfig``.
            metrics: Metrics sink; defaults to ``LoggingMetricsCollector``.
            events: Event channel; defaults to a new ``EventChannel``.
            context_logger: Logger handed to providers through the context.
        """
        self._registry = CapabilityRegistry()
        self._events = events or EventChannel()
        self._context = ExecutionContext(
            registry=self._registry,
            config=config or AgentConfig(),
            state={},
            logger=context_logger or logging.getLogger(CONTEXT_LOGGER_NAME),
            metrics=metrics or LoggingMetricsCollector(),
        )
        self._workflows = WorkflowExecutor(context=self._context, events=self._events)

    @property
    def config(self) -> AgentConfig:
        return self._context.config

    @property
    def context(self) -> ExecutionContext:
        return self._context

    @property
    def events(self) -> EventChannel:
        return self._events

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    async def register_provider(self, provider: CapabilityProvider) -> None:
        """
        Initialize and register a provider.

        Runs the provider's ``initialize(ctx)`` hook when present. If the hook
        fails the provider is not stored and ``InitializationError`` is raised.
        Re-registering a name replaces the previous provider.

        Raises:
            InitializationError: If the ``initialize`` hook raised.
        """
        name = normalize_name(provider.name)
        hook = getattr(provider, "initialize", None)
        if hook is not None:
            try:
                result = hook(self._context)
                if inspect.isawaitable(result):
                    await result
            except InitializationError:
                logger.error(f"Failed to register provider: {name}")
                raise
            except Exception as e:
                logger.error(f"Failed to register provider: {name}: {e}")
                raise InitializationError(name, describe_error(e), cause=e) from e

        self._registry.register(provider)
        logger.info(f"Provider registered: {name} v{provider.version}")
        self._events.emit(AgentEventType.provider_registered, name, {"version": str(provider.version)})

    def get_provider(self, name: NameLike) -> Optional[CapabilityProvider]:
        return self._registry.get(name)

    def list_providers(self) -> List[ProviderInfo]:
        return self._registry.list_info()

    async def execute_provider(self, name: NameLike, payload: Any = None) -> Any:
        """
        Execute one provider directly, outside any workflow.

        Raises:
            NotFoundError: If no provider is registered under ``name``.
            Exception: Whatever the provider raised, unchanged.
        """
        key = normalize_name(name)
        provider = self._registry.require(key)

        start = time.perf_counter()
        try:
            return await provider.execute(payload, self._context)
        except Exception as e:
            logger.error(f"Provider execution failed: {key}: {describe_error(e)}")
            raise
        finally:
            self._context.metrics.timing(f"provider.{key}.duration", (time.perf_counter() - start) * 1000.0)

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def register_workflow(self, name: NameLike, fn: WorkflowFn) -> None:
        self._workflows.register(name, fn)

    def list_workflows(self) -> List[str]:
        return self._workflows.names()

    async def execute_workflow(self, name: NameLike, payload: Any = None) -> WorkflowResult:
        """Run a registered workflow; always returns a ``WorkflowResult``."""
        return await self._workflows.execute(name, payload)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def cleanup(self) -> None:
        """
        Tear down the agent.

        Every provider's ``cleanup`` hook is attempted; failures are logged and
        skipped. Afterwards the registry, the workflow table and the shared
        state store are cleared unconditionally.
        """
        logger.info("Starting agent cleanup...")
        try:
            failed = await self._registry.cleanup()
        finally:
            self._workflows.clear()
            self._context.state.clear()
        if failed:
            logger.warning(f"Agent cleanup completed with failing providers: {failed}")
        else:
            logger.info("Agent cleanup completed")

    async def __aenter__(self) -> "AgentInstance":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.cleanup()
