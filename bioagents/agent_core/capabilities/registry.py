from __future__ import annotations

"""Capability registry.

The registry maps a provider name to the provider instance registered under
it. Names are plain strings; ``ProviderName`` members are accepted too and
normalized to their string value.

Lifecycle (running ``initialize`` before storing, emitting events) is handled
by ``AgentInstance``; the registry owns storage, lookup, listing and the
best-effort ``cleanup`` sweep.
"""

import inspect
import logging
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union

from ..errors import NotFoundError
from ..schemas.domain import ProviderInfo
from .base import CapabilityProvider

logger = logging.getLogger(__name__)

NameLike = Union[str, Enum]


def normalize_name(name: NameLike) -> str:
    if isinstance(name, Enum):
        return str(name.value)
    return str(name)


class CapabilityRegistry:
    """
    In-memory mapping of provider names to provider instances.

    Notes:
        - ``register`` replaces any existing provider with the same name; the
          previous instance is returned and is not cleaned up.
        - ``get`` returns ``None`` for unknown names; ``require`` raises
          ``NotFoundError``.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._providers: Dict[str, CapabilityProvider] = {}

    def register(self, provider: CapabilityProvider) -> Optional[CapabilityProvider]:
        """
        Store a provider under its ``name``.

        Args:
            provider: The provider instance.

        Returns:
            The provider previously registered under that name, if any.
        """
        key = normalize_name(provider.name)
        previous = self._providers.get(key)
        if previous is not None and previous is not provider:
            logger.info(f"Replacing provider '{key}' v{previous.version} with v{provider.version}")
        self._providers[key] = provider
        return previous

    def get(self, name: NameLike) -> Optional[CapabilityProvider]:
        return self._providers.get(normalize_name(name))

    def require(self, name: NameLike) -> CapabilityProvider:
        """
        Retrieve a registered provider by name.

        Raises:
            NotFoundError: If no provider is registered with the given name.
        """
        key = normalize_name(name)
        try:
            return self._providers[key]
        except KeyError as e:
            raise NotFoundError(key, kind="provider") from e

    def has(self, name: NameLike) -> bool:
        return normalize_name(name) in self._providers

    def names(self) -> List[str]:
        return list(self._providers)

    def list_info(self) -> List[ProviderInfo]:
        """Describe registered providers by name, version and description only."""
        return [
            ProviderInfo(name=key, version=str(p.version), description=str(getattr(p, "description", "") or ""))
            for key, p in self._providers.items()
        ]

    async def cleanup(self) -> List[str]:
        """Run every provider's ``cleanup`` hook, then empty the registry.

        A failing hook is logged and does not stop the remaining hooks. The
        registry is cleared regardless of hook outcomes.

        Returns:
            Names of the providers whose hook failed.
        """
        failed: List[str] = []
        try:
            for key, provider in list(self._providers.items()):
                hook = getattr(provider, "cleanup", None)
                if hook is None:
                    continue
                try:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                    logger.info(f"Provider cleaned up: {key}")
                except Exception as e:
                    logger.error(f"Provider cleanup failed: {key}: {e}", exc_info=True)
                    failed.append(key)
        finally:
            self._providers.clear()
        return failed

    def clear(self) -> None:
        self._providers.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, (str, Enum)) and self.has(name)

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[CapabilityProvider]:
        return iter(list(self._providers.values()))
