from __future__ import annotations

"""Factory for the fully wired HeliXID bioagent.

``create_helixid_bioagent`` registers the Dataverse harvester, the metadata
enricher and the DID issuer, then the harvest-enrich-issue pipeline and its
single-stage test workflows.
"""

import logging
from typing import Optional

import httpx
from pydantic_ai.models import Model

from .agent_core.agent import AgentInstance
from .agent_core.events import EventChannel
from .agent_core.factory import create_agent
from .agent_core.metrics import MetricsCollector
from .agent_core.schemas.domain import WorkflowName
from .core.config import AgentConfig
from .providers import DataverseHarvesterProvider, DIDIssuerProvider, MetadataEnricherProvider
from .workflows import pipeline

logger = logging.getLogger(__name__)


async def create_helixid_bioagent(
    config: AgentConfig,
    *,
    metrics: Optional[MetricsCollector] = None,
    events: Optional[EventChannel] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    model: Optional[Model] = None,
) -> AgentInstance:
    """
    Build an agent with the three pipeline providers and four workflows registered.

    Args:
        config: Agent configuration; ``dataverse`` and ``llm`` (unless ``model`` is given) are required.
        metrics: Optional metrics sink.
        events: Optional event channel, e.g. one with subscribers already attached.
        http_client: Optional HTTP client for the Dataverse harvester.
        model: Optional pydantic-ai model for the enricher, bypassing ``config.llm``.

    Returns:
        The ready ``AgentInstance``.

    Raises:
        InitializationError: If any provider fails to initialize. Providers
            registered before the failure are cleaned up first.
    """
    agent = create_agent(config, metrics=metrics, events=events)
    try:
        await agent.register_provider(DataverseHarvesterProvider(client=http_client))
        await agent.register_provider(MetadataEnricherProvider(model=model))
        await agent.register_provider(DIDIssuerProvider())
    except Exception:
        await agent.cleanup()
        raise

    agent.register_workflow(WorkflowName.harvest_enrich_issue, pipeline.harvest_enrich_issue_workflow)
    agent.register_workflow(WorkflowName.test_harvest, pipeline.test_harvest_workflow)
    agent.register_workflow(WorkflowName.test_enrichment, pipeline.test_enrichment_workflow)
    agent.register_workflow(WorkflowName.test_did_issuance, pipeline.test_did_issuance_workflow)

    logger.info(
        f"HeliXID bioagent ready: providers={[p.name for p in agent.list_providers()]}, "
        f"workflows={agent.list_workflows()}"
    )
    return agent
