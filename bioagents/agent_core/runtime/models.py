from __future__ import annotations

"""Workflow definition types.

A workflow is a name bound to an async function ``(payload, ctx) -> output``.
Workflow bodies reach providers through ``ctx.require_provider`` and record
each stage with ``ctx.append_step``.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from ..capabilities.base import ExecutionContext

WorkflowFn = Callable[[Any, ExecutionContext], Union[Awaitable[Any], Any]]
"""
WorkflowFn:
    Callable taking the caller's input and the per-run ``ExecutionContext``.
    Coroutine functions are awaited; plain functions are called directly.
"""


@dataclass(frozen=True)
class WorkflowDefinition:
    name: str
    fn: WorkflowFn
