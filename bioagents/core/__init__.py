"""
Core utilities and configuration for bioagents.

This package provides logging configuration and the settings / configuration
models shared by the orchestration core and the concrete providers.
"""

from bioagents.core.config import (
    AgentConfig,
    AgentSettings,
    DataverseConfig,
    DKGConfig,
    GDPRConfig,
    IssuerConfig,
    LLMConfig,
)
from bioagents.core.logging_config import get_logger, setup_logging

__all__ = [
    "AgentConfig",
    "AgentSettings",
    "DataverseConfig",
    "DKGConfig",
    "GDPRConfig",
    "IssuerConfig",
    "LLMConfig",
    "get_logger",
    "setup_logging",
]
