"""HeliXID bioagents.

Orchestration engine that harvests dataset metadata from Dataverse, enriches
it with LLM analyses and issues a decentralized identifier with a verifiable
credential for it, recording an audit trail per run.

Quick start::

    from bioagents import AgentConfig, DataverseConfig, LLMConfig, create_helixid_bioagent

    config = AgentConfig(dataverse=DataverseConfig(api_url="https://demo.dataverse.org"), llm=LLMConfig())
    async with await create_helixid_bioagent(config) as agent:
        result = await agent.execute_workflow("harvest-enrich-issue", {"doi": "10.5072/FK2/ABC123"})
"""

from .agent_core import (
    AgentEvent,
    AgentEventType,
    AgentInstance,
    BioAgentsError,
    CapabilityProvider,
    CapabilityRegistry,
    EventChannel,
    ExecutionContext,
    InitializationError,
    NotFoundError,
    ProviderExecutionError,
    ProviderInfo,
    ProviderName,
    StepRecord,
    StepRecorder,
    WorkflowExecutor,
    WorkflowName,
    WorkflowResult,
    create_agent,
)
from .core import AgentConfig, AgentSettings, DataverseConfig, DKGConfig, GDPRConfig, IssuerConfig, LLMConfig
from .factory import create_helixid_bioagent

__all__ = [
    "AgentConfig",
    "AgentEvent",
    "AgentEventType",
    "AgentInstance",
    "AgentSettings",
    "BioAgentsError",
    "CapabilityProvider",
    "CapabilityRegistry",
    "DKGConfig",
    "DataverseConfig",
    "EventChannel",
    "ExecutionContext",
    "GDPRConfig",
    "InitializationError",
    "IssuerConfig",
    "LLMConfig",
    "NotFoundError",
    "ProviderExecutionError",
    "ProviderInfo",
    "ProviderName",
    "StepRecord",
    "StepRecorder",
    "WorkflowExecutor",
    "WorkflowName",
    "WorkflowResult",
    "create_agent",
    "create_helixid_bioagent",
]
