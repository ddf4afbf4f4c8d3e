from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio

from bioagents.agent_core.capabilities.base import ExecutionContext
from bioagents.agent_core.factory import create_agent
from bioagents.agent_core.schemas.domain import ProviderName, WorkflowName
from bioagents.core.config import AgentConfig
from bioagents.providers.did_issuer import DIDIssuerProvider
from bioagents.providers.schemas import (
    CulturalContext,
    DatasetMetadata,
    EnrichedMetadata,
    Enrichment,
    EnrichmentOptions,
    EnrichRequest,
    GDPRCompliance,
    HarvestRequest,
    IssuanceOptions,
    QualityAssessment,
)
from bioagents.workflows import pipeline


def _harvest(payload: Any, ctx: ExecutionContext) -> DatasetMetadata:
    request = HarvestRequest.model_validate(payload)
    return DatasetMetadata(id=request.dataset_id or "from-doi", title="Danube Delta")


def _enrich(request: EnrichRequest, ctx: ExecutionContext) -> EnrichedMetadata:
    return EnrichedMetadata(
        **request.metadata.model_dump(exclude={"enrichment"}),
        enrichment=Enrichment(
            quality_assessment=QualityAssessment(completeness_score=82),
            gdpr_compliance=GDPRCompliance(personal_data_detected=False),
            cultural_context=CulturalContext(sensitive_practices=["funeral rites"]),
        ),
    )


@pytest_asyncio.fixture
async def wired(make_provider, metrics):
    agent = create_agent(AgentConfig(), metrics=metrics)
    harvester = make_provider(ProviderName.dataverse_harvester.value, result=_harvest)
    enricher = make_provider(ProviderName.metadata_enricher.value, result=_enrich)
    await agent.register_provider(harvester)
    await agent.register_provider(enricher)
    await agent.register_provider(DIDIssuerProvider())
    agent.register_workflow(WorkflowName.harvest_enrich_issue, pipeline.harvest_enrich_issue_workflow)
    agent.register_workflow(WorkflowName.test_enrichment, pipeline.test_enrichment_workflow)
    agent.register_workflow(WorkflowName.test_did_issuance, pipeline.test_did_issuance_workflow)
    agent.register_workflow(WorkflowName.test_harvest, pipeline.test_harvest_workflow)
    return agent, harvester, enricher


class TestWithDefaults:
    def test_defaults_only(self) -> None:
        options = pipeline.with_defaults(EnrichmentOptions, pipeline.PIPELINE_ENRICHMENT_DEFAULTS, None)
        assert options.model_dump() == EnrichmentOptions(
            cultural_context=True, gdpr_compliance=True, sensitivity_check=True, quality_assessment=True
        ).model_dump()

    def test_caller_values_win_in_either_spelling(self) -> None:
        options = pipeline.with_defaults(
            IssuanceOptions,
            pipeline.PIPELINE_ISSUANCE_DEFAULTS,
            {"publishToDKG": False, "expiration_days": 10},
        )
        assert options.publish_to_dkg is False
        assert options.expiration_days == 10
        assert options.credential_type == "CulturalHeritageDatasetCredential"


class TestHarvestEnrichIssueWorkflow:
    @pytest.mark.asyncio
    async def test_full_run(self, wired) -> None:
        agent, harvester, enricher = wired

        result = await agent.execute_workflow(WorkflowName.harvest_enrich_issue, {"datasetId": "42"})

        assert result.success is True, result.error
        assert result.step_names == ["dataverse-harvest", "metadata-enrichment", "did-issuance"]

        output = result.output
        assert isinstance(output, pipeline.PipelineResult)
        assert output.metadata.id == "42"
        assert output.enriched_metadata.enrichment.quality_assessment.completeness_score == 82
        assert output.did_result.verifiable_credential.type[1] == "CulturalHeritageDatasetCredential"
        assert output.summary.steps_completed == result.step_names
        assert output.summary.quality_score == 82
        assert output.summary.gdpr_compliant is True
        assert output.summary.cultural_sensitivity_flags == ["funeral rites"]

        sent = enricher.calls[0]
        assert sent.options.model_dump() == EnrichmentOptions(
            cultural_context=True, gdpr_compliance=True, sensitivity_check=True, quality_assessment=True
        ).model_dump()

    @pytest.mark.asyncio
    async def test_caller_options_override_defaults(self, wired) -> None:
        agent, _, enricher = wired

        result = await agent.execute_workflow(
            "harvest-enrich-issue",
            {
                "doi": "10.5072/FK2/X",
                "enrichmentOptions": {"multilingualProcessing": True, "culturalContext": False},
                "didOptions": {"expirationDays": 7, "credentialType": "DatasetCredential"},
            },
        )

        assert result.success, result.error
        options = enricher.calls[0].options
        assert options.multilingual_processing is True
        assert options.cultural_context is False
        assert options.gdpr_compliance is True
        issue_input = result.audit_trail[2].input
        assert issue_input.options.expiration_days == 7
        assert issue_input.options.publish_to_dkg is True

    @pytest.mark.asyncio
    async def test_provenance_carries_stage_timestamps(self, wired) -> None:
        agent, _, _ = wired

        result = await agent.execute_workflow(WorkflowName.harvest_enrich_issue, {"datasetId": "42"})

        assert result.success, result.error
        issue_input = result.audit_trail[2].input
        assert issue_input.harvested_at is not None
        assert issue_input.enriched_at is not None
        assert issue_input.harvested_at <= issue_input.enriched_at

        provenance = result.output.did_result.provenance
        harvested = datetime.fromisoformat(provenance.harvest_timestamp.replace("Z", "+00:00"))
        enriched = datetime.fromisoformat(provenance.enrichment_timestamp.replace("Z", "+00:00"))
        issued = datetime.fromisoformat(provenance.issuance_timestamp.replace("Z", "+00:00"))
        assert harvested == issue_input.harvested_at
        assert enriched == issue_input.enriched_at
        assert harvested <= enriched <= issued

    @pytest.mark.asyncio
    async def test_enrichment_failure_keeps_harvest_step_only(self, wired, make_provider) -> None:
        agent, _, _ = wired
        await agent.register_provider(
            make_provider(ProviderName.metadata_enricher.value, error=RuntimeError("model overloaded"))
        )

        result = await agent.execute_workflow("harvest-enrich-issue", {"datasetId": "42"})

        assert result.success is False
        assert result.step_names == ["dataverse-harvest"]
        assert result.error == "model overloaded"
        assert result.output is None

    @pytest.mark.asyncio
    async def test_missing_provider_fails_the_run(self, make_provider) -> None:
        agent = create_agent()
        agent.register_workflow("harvest-enrich-issue", pipeline.harvest_enrich_issue_workflow)

        result = await agent.execute_workflow("harvest-enrich-issue", {"datasetId": "42"})

        assert result.success is False
        assert result.error == "Provider not found: dataverse-harvester"


class TestSingleStageWorkflows:
    @pytest.mark.asyncio
    async def test_harvest(self, wired) -> None:
        agent, harvester, _ = wired
        result = await agent.execute_workflow("test-harvest", {"datasetId": "7"})
        assert result.success, result.error
        assert result.step_names == ["dataverse-harvest"]
        assert harvester.calls == [{"datasetId": "7"}]

    @pytest.mark.asyncio
    async def test_enrichment_defaults(self, wired) -> None:
        agent, _, enricher = wired
        result = await agent.execute_workflow(
            "test-enrichment", {"metadata": {"id": "1", "title": "T"}, "options": {"qualityAssessment": False}}
        )
        assert result.success, result.error
        assert result.step_names == ["metadata-enrichment"]
        expected = EnrichmentOptions(cultural_context=True, gdpr_compliance=True)
        assert enricher.calls[0].options.model_dump() == expected.model_dump()

    @pytest.mark.asyncio
    async def test_did_issuance_defaults(self, wired) -> None:
        agent, _, _ = wired
        result = await agent.execute_workflow(
            "test-did-issuance", {"enrichedMetadata": {"id": "1", "title": "T"}}
        )
        assert result.success, result.error
        assert result.step_names == ["did-issuance"]
        request = result.audit_trail[0].input
        assert request.options.publish_to_dkg is False
        assert request.options.expiration_days == 30
        assert result.output.dkg_knowledge_asset_id is None
