"""Harvest, enrich and issue workflows.

``harvest_enrich_issue_workflow`` chains the three pipeline providers and
records one audit step per stage. The ``test_*`` workflows run a single
provider each with test-friendly defaults.

A failing stage propagates its error; the executor turns it into a failed
``WorkflowResult`` whose audit trail holds the stages completed before it.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import Field

from ..agent_core.capabilities.base import ExecutionContext
from ..agent_core.schemas.domain import ProviderName
from ..providers.schemas import (
    DatasetMetadata,
    DIDCreationResult,
    EnrichedMetadata,
    EnrichmentOptions,
    EnrichRequest,
    HarvestRequest,
    IssuanceOptions,
    IssueRequest,
    ProviderSchema,
)

M = TypeVar("M", bound=ProviderSchema)

STEP_HARVEST = "dataverse-harvest"
STEP_ENRICH = "metadata-enrichment"
STEP_ISSUE = "did-issuance"

PIPELINE_ENRICHMENT_DEFAULTS: Dict[str, Any] = {
    "cultural_context": True,
    "multilingual_processing": False,
    "gdpr_compliance": True,
    "sensitivity_check": True,
    "quality_assessment": True,
}
PIPELINE_ISSUANCE_DEFAULTS: Dict[str, Any] = {
    "publish_to_dkg": True,
    "expiration_days": 365,
    "credential_type": "CulturalHeritageDatasetCredential",
}
TEST_ENRICHMENT_DEFAULTS: Dict[str, Any] = {
    "cultural_context": True,
    "gdpr_compliance": True,
    "quality_assessment": True,
}
TEST_ISSUANCE_DEFAULTS: Dict[str, Any] = {
    "publish_to_dkg": False,
    "expiration_days": 30,
}


class PipelineRequest(HarvestRequest):
    enrichment_options: Optional[Dict[str, Any]] = None
    did_options: Optional[Dict[str, Any]] = None


class PipelineSummary(ProviderSchema):
    processing_time_ms: float
    steps_completed: List[str]
    quality_score: Optional[float] = None
    gdpr_compliant: bool = False
    cultural_sensitivity_flags: List[str] = Field(default_factory=list)


class PipelineResult(ProviderSchema):
    metadata: DatasetMetadata
    enriched_metadata: EnrichedMetadata
    did_result: DIDCreationResult
    summary: PipelineSummary


class StageRequest(ProviderSchema):
    options: Optional[Dict[str, Any]] = None


def with_defaults(model: Type[M], defaults: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> M:
    """Build ``model`` from ``defaults``; fields the caller set explicitly win."""
    base = model(**defaults)
    if not overrides:
        return base
    given = model.model_validate(overrides)
    return base.model_copy(update={name: getattr(given, name) for name in given.model_fields_set})


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


async def harvest_enrich_issue_workflow(payload: Any, ctx: ExecutionContext) -> PipelineResult:
    """
    Harvest a Dataverse dataset, enrich its metadata and issue a DID for it.

    Args:
        payload: ``PipelineRequest`` fields: one dataset identifier plus optional
            ``enrichmentOptions`` / ``didOptions`` overriding the pipeline defaults.
        ctx: The run's execution context.

    Returns:
        PipelineResult with every stage's output and a summary.
    """
    start = time.perf_counter()
    steps: List[str] = []
    request = PipelineRequest.model_validate(payload or {})
    ctx.logger.info(f"Starting harvest-enrich-issue workflow: {request.model_dump(exclude_none=True)}")

    try:
        # 1. harvest
        harvester = ctx.require_provider(ProviderName.dataverse_harvester)
        stage_start = time.perf_counter()
        harvest_request = HarvestRequest(
            dataset_id=request.dataset_id, doi=request.doi, persistent_id=request.persistent_id
        )
        metadata: DatasetMetadata = await harvester.execute(harvest_request, ctx)
        harvested_at = datetime.now(timezone.utc)
        ctx.append_step(STEP_HARVEST, input=harvest_request, output=metadata, duration_ms=_elapsed_ms(stage_start))
        steps.append(STEP_HARVEST)
        ctx.logger.info(f"Dataset metadata harvested: id={metadata.id}, files={len(metadata.files)}")

        # 2. enrich
        enricher = ctx.require_provider(ProviderName.metadata_enricher)
        stage_start = time.perf_counter()
        enrich_request = EnrichRequest(
            metadata=metadata,
            options=with_defaults(EnrichmentOptions, PIPELINE_ENRICHMENT_DEFAULTS, request.enrichment_options),
        )
        enriched: EnrichedMetadata = await enricher.execute(enrich_request, ctx)
        enriched_at = datetime.now(timezone.utc)
        ctx.append_step(STEP_ENRICH, input=enrich_request, output=enriched, duration_ms=_elapsed_ms(stage_start))
        steps.append(STEP_ENRICH)
        ctx.logger.info(f"Metadata enriched: keys={enriched.enrichment.requested_keys()}")

        # 3. issue
        issuer = ctx.require_provider(ProviderName.did_issuer)
        stage_start = time.perf_counter()
        issue_request = IssueRequest(
            enriched_metadata=enriched,
            options=with_defaults(IssuanceOptions, PIPELINE_ISSUANCE_DEFAULTS, request.did_options),
            harvested_at=harvested_at,
            enriched_at=enriched_at,
        )
        did_result: DIDCreationResult = await issuer.execute(issue_request, ctx)
        ctx.append_step(STEP_ISSUE, input=issue_request, output=did_result, duration_ms=_elapsed_ms(stage_start))
        steps.append(STEP_ISSUE)
        ctx.logger.info(f"DID and VC issued: did={did_result.did}, dkg_asset={did_result.dkg_knowledge_asset_id}")
    except Exception as e:
        ctx.logger.error(f"Harvest-enrich-issue workflow failed after steps {steps}: {e}")
        raise

    enrichment = enriched.enrichment
    summary = PipelineSummary(
        processing_time_ms=_elapsed_ms(start),
        steps_completed=steps,
        quality_score=enrichment.quality_assessment.completeness_score if enrichment.quality_assessment else None,
        gdpr_compliant=(
            enrichment.gdpr_compliance is not None and not enrichment.gdpr_compliance.personal_data_detected
        ),
        cultural_sensitivity_flags=(
            list(enrichment.cultural_context.sensitive_practices) if enrichment.cultural_context else []
        ),
    )
    ctx.logger.info(
        f"Harvest-enrich-issue workflow completed: dataset={metadata.id}, did={did_result.did}, "
        f"duration={summary.processing_time_ms:.2f}ms"
    )
    return PipelineResult(metadata=metadata, enriched_metadata=enriched, did_result=did_result, summary=summary)


async def test_harvest_workflow(payload: Any, ctx: ExecutionContext) -> DatasetMetadata:
    ctx.logger.info("Running test harvest workflow")
    harvester = ctx.require_provider(ProviderName.dataverse_harvester)
    start = time.perf_counter()
    metadata = await harvester.execute(payload, ctx)
    ctx.append_step(STEP_HARVEST, input=payload, output=metadata, duration_ms=_elapsed_ms(start))
    return metadata


async def test_enrichment_workflow(payload: Any, ctx: ExecutionContext) -> EnrichedMetadata:
    ctx.logger.info("Running test enrichment workflow")
    enricher = ctx.require_provider(ProviderName.metadata_enricher)
    data = dict(payload or {})
    request = EnrichRequest(
        metadata=DatasetMetadata.model_validate(data.get("metadata")),
        options=with_defaults(EnrichmentOptions, TEST_ENRICHMENT_DEFAULTS, StageRequest.model_validate(data).options),
    )
    start = time.perf_counter()
    enriched = await enricher.execute(request, ctx)
    ctx.append_step(STEP_ENRICH, input=request, output=enriched, duration_ms=_elapsed_ms(start))
    return enriched


async def test_did_issuance_workflow(payload: Any, ctx: ExecutionContext) -> DIDCreationResult:
    # Test runs never publish to the knowledge graph unless asked to
    ctx.logger.info("Running test DID issuance workflow")
    issuer = ctx.require_provider(ProviderName.did_issuer)
    data = dict(payload or {})
    metadata = data.get("enrichedMetadata", data.get("enriched_metadata"))
    request = IssueRequest(
        enriched_metadata=EnrichedMetadata.model_validate(metadata),
        options=with_defaults(IssuanceOptions, TEST_ISSUANCE_DEFAULTS, StageRequest.model_validate(data).options),
    )
    start = time.perf_counter()
    result = await issuer.execute(request, ctx)
    ctx.append_step(STEP_ISSUE, input=request, output=result, duration_ms=_elapsed_ms(start))
    return result
