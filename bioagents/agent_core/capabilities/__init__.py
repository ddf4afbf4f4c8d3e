"""Capability providers and the registry that holds them.

 A *capability provider* is a pluggable, named and versioned unit of work
 (harvesting dataset metadata, enriching it with a language model, issuing a
 decentralized identity, ...). The orchestration core does not know what any
 provider does; it only:

 - runs the optional ``initialize`` hook before storing a provider,
 - resolves providers by name for workflows and direct execution,
 - runs the optional ``cleanup`` hooks best-effort at teardown.

 This package exports:

 - ``CapabilityProvider``: protocol for async provider execution.
 - ``CapabilityRegistry``: name → provider instance mapping.
 - ``ExecutionContext``: the config/state/logging/metrics bag passed to providers.
 """

from .base import CapabilityProvider, ExecutionContext
from .registry import CapabilityRegistry, normalize_name

__all__ = [
    "CapabilityProvider",
    "CapabilityRegistry",
    "ExecutionContext",
    "normalize_name",
]
