"""Workflow bodies registered by the HeliXID bioagent."""

from .pipeline import (
    PipelineRequest,
    PipelineResult,
    PipelineSummary,
    harvest_enrich_issue_workflow,
    test_did_issuance_workflow,
    test_enrichment_workflow,
    test_harvest_workflow,
)

__all__ = [
    "PipelineRequest",
    "PipelineResult",
    "PipelineSummary",
    "harvest_enrich_issue_workflow",
    "test_did_issuance_workflow",
    "test_enrichment_workflow",
    "test_harvest_workflow",
]
