"""In-process event channel for lifecycle observability.

``EventChannel`` is a fire-and-forget publish/subscribe channel carrying the
``AgentEventType`` events (provider registered, workflow registered / started
/ completed / failed).

Delivery rules:

- ``emit`` never raises because of a subscriber. A handler that raises is
  logged and skipped.
- Coroutine handlers are scheduled as tasks on the running loop and not
  awaited by the emitter. With no running loop they are dropped with a warning.
- Handlers for one event are invoked in subscription order, but callers must
  not rely on any cross-subscriber ordering.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from .schemas.domain import AgentEvent, AgentEventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[AgentEvent], Union[None, Awaitable[None]]]


class EventChannel:
    """Publish/subscribe channel keyed by ``AgentEventType``."""

    def __init__(self) -> None:
        self._handlers: Dict[AgentEventType, List[EventHandler]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, event_type: Union[AgentEventType, str], handler: EventHandler) -> Callable[[], None]:
        """
        Subscribe a handler to one event type.

        Args:
            event_type: An ``AgentEventType`` or its string value (e.g. ``"workflow:failed"``).
            handler: Plain function or coroutine function taking an ``AgentEvent``.

        Returns:
            A callable that removes this subscription.
        """
        etype = AgentEventType(event_type)
        self._handlers[etype].append(handler)

        def _unsubscribe() -> None:
            self.unsubscribe(etype, handler)

        return _unsubscribe

    def unsubscribe(self, event_type: Union[AgentEventType, str], handler: EventHandler) -> bool:
        handlers = self._handlers.get(AgentEventType(event_type))
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def subscriber_count(self, event_type: Union[AgentEventType, str]) -> int:
        return len(self._handlers.get(AgentEventType(event_type), ()))

    def emit(
        self,
        event_type: Union[AgentEventType, str],
        name: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> AgentEvent:
        """Publish an event to the current subscribers and return it."""
        event = AgentEvent(type=AgentEventType(event_type), name=name, payload=dict(payload or {}))
        for handler in list(self._handlers.get(event.type, ())):
            self._dispatch(handler, event)
        return event

    async def drain(self) -> None:
        """Wait for coroutine handlers scheduled so far to finish."""
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def _dispatch(self, handler: EventHandler, event: AgentEvent) -> None:
        try:
            result = handler(event)
        except Exception as e:
            logger.warning(f"Event handler failed for {event.type.value}: {e}", exc_info=True)
            return

        if not inspect.isawaitable(result):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropping async handler for {event.type.value}")
            if inspect.iscoroutine(result):
                result.close()
            return

        task = loop.create_task(self._run_async_handler(result, event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @staticmethod
    async def _run_async_handler(awaitable: Awaitable[Any], event: AgentEvent) -> None:
        try:
            await awaitable
        except Exception as e:
            logger.warning(f"Async event handler failed for {event.type.value}: {e}", exc_info=True)
