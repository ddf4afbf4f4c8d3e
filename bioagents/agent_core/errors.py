"""Error types raised by the orchestration core.

Purpose:
- Give setup failures (unknown names, failing ``initialize`` hooks) a typed,
  catchable shape for callers of registration and lookup APIs.
- Let concrete providers wrap transport or model failures with a stage prefix.

Workflow execution never raises these to its caller: ``execute_workflow``
turns them into a failed ``WorkflowResult``. The direct provider path
(``execute_provider``) lets them propagate unchanged.
"""

from __future__ import annotations

from typing import Optional


class BioAgentsError(Exception):
    pass


class NotFoundError(BioAgentsError, LookupError):
    """Raised when a provider or workflow name is not registered.

    Args:
        name: The name that was looked up.
        kind: What was looked up (``"provider"`` or ``"workflow"``).
    """

    def __init__(self, name: str, *, kind: str = "provider") -> None:
        super().__init__(f"{kind.capitalize()} not found: {name}")
        self.name = name
        self.kind = kind


class InitializationError(BioAgentsError):
    """Raised when a provider's ``initialize`` hook fails.

    The provider is not stored in the registry when this is raised.
    """

    def __init__(self, name: str, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Failed to initialize provider '{name}': {message}")
        self.name = name
        self.cause = cause


class ProviderExecutionError(BioAgentsError):
    """Raised by a provider when its own work fails.

    Args:
        stage: Human readable stage label used as the message prefix.
        message: Underlying failure description.
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage} failed: {message}")
        self.stage = stage
