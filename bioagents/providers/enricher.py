"""LLM-backed metadata enrichment provider.

Each analysis runs as its own pydantic-ai ``Agent`` with a structured
``output_type``. When a model cannot produce a valid structured answer the
analysis falls back to neutral defaults and logs a warning; transport or
authentication failures are not masked and fail the whole enrichment.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic_ai import Agent, ModelSettings
from pydantic_ai.exceptions import UnexpectedModelBehavior
from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.openai import OpenAIResponsesModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.azure import AzureProvider
from pydantic_ai.providers.openai import OpenAIProvider

from ..agent_core.capabilities.base import ExecutionContext
from ..agent_core.errors import InitializationError, ProviderExecutionError
from ..agent_core.schemas.domain import ProviderName
from ..core.config import LLMConfig
from .schemas import (
    CulturalContext,
    DatasetMetadata,
    EnrichedMetadata,
    Enrichment,
    EnrichRequest,
    GDPRCompliance,
    QualityAssessment,
    SemanticTags,
    SensitivityAssessment,
    Translation,
)

logger = logging.getLogger(__name__)

TARGET_LANGUAGES = ("es", "fr", "de", "it", "pt")

T = TypeVar("T", bound=BaseModel)


def build_model(config: LLMConfig) -> Model:
    """
    Create the pydantic-ai model for an ``LLMConfig``.

    Raises:
        ValueError: If the provider is not supported.
    """
    model_settings = ModelSettings(temperature=config.temperature, max_tokens=config.max_tokens)
    provider = config.provider.lower()

    if provider == "openai":
        logger.debug(f"Creating OpenAI model: {config.model}")
        return OpenAIResponsesModel(
            config.model,
            provider=OpenAIProvider(api_key=config.api_key, base_url=config.endpoint),
            settings=model_settings,
        )
    if provider == "anthropic":
        logger.debug(f"Creating Anthropic model: {config.model}")
        return AnthropicModel(
            config.model,
            provider=AnthropicProvider(api_key=config.api_key),
            settings=model_settings,
        )
    if provider == "azure":
        if not config.endpoint:
            raise ValueError("Azure provider requires an endpoint")
        logger.debug(f"Creating Azure OpenAI model: {config.model}")
        return OpenAIResponsesModel(
            config.model,
            provider=AzureProvider(
                azure_endpoint=config.endpoint,
                api_version=config.api_version,
                api_key=config.api_key,
            ),
            settings=model_settings,
        )
    raise ValueError(f"Unsupported LLM provider: {config.provider}")


def _describe(metadata: DatasetMetadata) -> str:
    authors = ", ".join(f"{a.name} ({a.affiliation or 'No affiliation'})" for a in metadata.authors)
    coverage = metadata.geographic_coverage.model_dump(exclude_none=True) if metadata.geographic_coverage else None
    return (
        f"Title: {metadata.title}\n"
        f"Description: {metadata.description}\n"
        f"Authors: {authors}\n"
        f"Subjects: {', '.join(metadata.subjects)}\n"
        f"Keywords: {', '.join(metadata.keywords)}\n"
        f"Geographic Coverage: {json.dumps(coverage)}\n"
        f"Files: {len(metadata.files)} files\n"
        f"License: {metadata.license or 'Not specified'}\n"
        f"DOI: {metadata.doi or 'Not specified'}\n"
    )


class MetadataEnricherProvider:
    """
    Provider enriching harvested dataset metadata with LLM analyses.

    Analyses run per ``EnrichmentOptions``: cultural context, quality
    assessment, GDPR compliance, sensitivity check and translations
    (es, fr, de, it, pt). Semantic tagging always runs.
    """

    name = ProviderName.metadata_enricher.value
    version = "1.0.0"
    description = "Enriches dataset metadata with cultural context, quality and GDPR analyses"

    def __init__(self, *, model: Optional[Model] = None) -> None:
        self._model = model

    @property
    def model(self) -> Optional[Model]:
        return self._model

    async def initialize(self, ctx: ExecutionContext) -> None:
        if self._model is None:
            llm = ctx.config.llm
            if llm is None:
                raise InitializationError(self.name, "LLM configuration is required")
            try:
                self._model = build_model(llm)
            except ValueError as e:
                raise InitializationError(self.name, str(e), cause=e) from e
            ctx.logger.info(f"Metadata Enricher initialized: provider={llm.provider}, model={llm.model}")
        else:
            ctx.logger.info("Metadata Enricher initialized with injected model")

    async def execute(self, payload: Any, ctx: ExecutionContext) -> EnrichedMetadata:
        """
        Enrich one dataset's metadata.

        Args:
            payload: ``EnrichRequest`` or a mapping with ``metadata`` and ``options``.
            ctx: The execution context.

        Returns:
            The input metadata with an ``enrichment`` section holding the requested analyses.

        Raises:
            ProviderExecutionError: If the payload is invalid or a model call fails.
        """
        start = time.perf_counter()
        dataset_id = None
        try:
            request = EnrichRequest.model_validate(payload)
            metadata, options = request.metadata, request.options
            dataset_id = metadata.id
            ctx.logger.info(
                f"Starting metadata enrichment: dataset={metadata.id}, title={metadata.title!r}, "
                f"options={options.model_dump(by_alias=True)}"
            )

            enrichment = Enrichment()
            if options.cultural_context:
                logger.debug("Performing cultural context enrichment")
                enrichment.cultural_context = await self._analyze(
                    ctx,
                    CulturalContext,
                    "You are a cultural heritage expert specializing in analyzing datasets for "
                    "cultural significance and sensitivity.",
                    "Analyze the following cultural heritage dataset for cultural context and significance. "
                    "Cover cultural significance, relevant cultural categories, community relevance, "
                    "historical importance and any sensitive cultural practices.\n\n" + _describe(metadata),
                    CulturalContext(),
                )

            if options.quality_assessment:
                logger.debug("Performing quality assessment")
                enrichment.quality_assessment = await self._analyze(
                    ctx,
                    QualityAssessment,
                    "You are a data quality expert specializing in research dataset metadata assessment.",
                    "Assess the quality of this dataset metadata. Rate completeness, consistency and "
                    "accuracy from 0 to 100 and recommend improvements.\n\n" + _describe(metadata),
                    QualityAssessment(recommendations=["Unable to assess quality automatically"]),
                )

            logger.debug("Performing semantic analysis")
            enrichment.semantic_tags = await self._analyze(
                ctx,
                SemanticTags,
                "You are an expert in semantic analysis and natural language processing.",
                "Perform semantic analysis on this dataset metadata. Extract named entities with a "
                "confidence, key concepts and research themes.\n\n" + _describe(metadata),
                SemanticTags(),
            )

            if options.gdpr_compliance:
                logger.debug("Performing GDPR compliance analysis")
                enrichment.gdpr_compliance = await self._analyze(
                    ctx,
                    GDPRCompliance,
                    "You are a GDPR compliance expert specializing in research data protection.",
                    "Analyze this dataset for GDPR compliance considerations: personal data present, "
                    "processing purposes, legal basis, retention period, risks and recommendations."
                    "\n\n" + _describe(metadata),
                    GDPRCompliance(recommendations=["Manual GDPR review recommended"]),
                )

            if options.sensitivity_check:
                logger.debug("Performing sensitivity check")
                enrichment.sensitivity = await self._analyze(
                    ctx,
                    SensitivityAssessment,
                    "You are a heritage ethics reviewer assessing datasets for culturally or "
                    "personally sensitive content.",
                    "Check this dataset for sensitive content such as sacred knowledge, human remains, "
                    "indigenous data or vulnerable groups, and say whether access should be restricted."
                    "\n\n" + _describe(metadata),
                    SensitivityAssessment(recommendations=["Manual sensitivity review recommended"]),
                )

            if options.multilingual_processing:
                logger.debug("Performing multilingual processing")
                enrichment.translations = await self._translate(metadata, ctx)

            result = EnrichedMetadata(**metadata.model_dump(exclude={"enrichment"}), enrichment=enrichment)
        except Exception as e:
            duration = (time.perf_counter() - start) * 1000.0
            ctx.metrics.timing("enricher.total.duration", duration)
            ctx.metrics.increment("enricher.error")
            ctx.logger.error(f"Metadata enrichment failed for dataset={dataset_id} after {duration:.2f}ms: {e}")
            raise ProviderExecutionError("Metadata enrichment", str(e) or e.__class__.__name__) from e

        duration = (time.perf_counter() - start) * 1000.0
        ctx.metrics.timing("enricher.total.duration", duration)
        ctx.metrics.increment("enricher.success")
        ctx.logger.info(
            f"Metadata enrichment completed: dataset={result.id}, "
            f"keys={enrichment.requested_keys()}, duration={duration:.2f}ms"
        )
        return result

    async def _analyze(
        self,
        ctx: ExecutionContext,
        output_type: Type[T],
        system_prompt: str,
        prompt: str,
        fallback: T,
    ) -> T:
        agent: Agent = Agent(self._require_model(), output_type=output_type, system_prompt=system_prompt)
        try:
            result = await agent.run(prompt)
        except UnexpectedModelBehavior as e:
            ctx.logger.warning(f"Could not parse {output_type.__name__} response, using fallback: {e}")
            return fallback
        return result.output

    async def _translate(self, metadata: DatasetMetadata, ctx: ExecutionContext) -> Dict[str, Translation]:
        translations: Dict[str, Translation] = {}
        agent: Agent = Agent(
            self._require_model(),
            output_type=Translation,
            system_prompt="You are a professional translator specializing in academic and cultural content.",
        )
        for lang in TARGET_LANGUAGES:
            prompt = (
                f"Translate the following dataset metadata to {lang}. Keep translations culturally "
                "appropriate and academically precise.\n\n"
                f"Title: {metadata.title}\n"
                f"Description: {metadata.description}\n"
                f"Keywords: {', '.join(metadata.keywords)}\n"
            )
            try:
                result = await agent.run(prompt)
            except Exception as e:
                ctx.logger.warning(f"Translation failed for language {lang}: {e}")
                continue
            translations[lang] = result.output
        return translations

    def _require_model(self) -> Model:
        if self._model is None:
            raise RuntimeError("Metadata enricher is not initialized")
        return self._model
