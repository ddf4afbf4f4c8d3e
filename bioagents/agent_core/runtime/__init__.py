"""Workflow execution runtime.

 The runtime takes a registered workflow function and runs it with:

 - a fresh, execution-scoped ``StepRecorder`` for the audit trail,
 - wall-clock timing and lifecycle events,
 - conversion of any raised error into a failed ``WorkflowResult``.

 The main entry point is ``WorkflowExecutor``.
 """

from .engine import WorkflowExecutor, describe_error
from .models import WorkflowDefinition, WorkflowFn
from .recorder import StepRecorder

__all__ = [
    "StepRecorder",
    "WorkflowDefinition",
    "WorkflowExecutor",
    "WorkflowFn",
    "describe_error",
]
