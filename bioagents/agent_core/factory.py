from __future__ import annotations

"""Convenience factory for a bare agent instance.

``create_agent`` builds an ``AgentInstance`` with no providers or workflows.
The fully wired HeliXID agent lives in ``bioagents.factory``.
"""

from typing import Optional

from ..core.config import AgentConfig
from .agent import AgentInstance
from .events import EventChannel
from .metrics import MetricsCollector


def create_agent(
    config: Optional[AgentConfig] = None,
    *,
    metrics: Optional[MetricsCollector] = None,
    events: Optional[EventChannel] = None,
) -> AgentInstance:
    """Construct an empty ``AgentInstance``."""
    return AgentInstance(config, metrics=metrics, events=events)
