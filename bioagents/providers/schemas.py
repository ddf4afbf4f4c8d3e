"""Pydantic models exchanged by the concrete pipeline providers.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``), matching the W3C DID / VC vocabulary and the
Dataverse-style payloads callers already send. Input models accept either
spelling and ignore unknown keys.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProviderSchema(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


# =====================================================================
# Harvest
# =====================================================================


class HarvestRequest(ProviderSchema):
    """Dataset identifier; at least one field must be set.

    When several are set the harvester resolves ``doi`` first, then
    ``persistent_id``, then ``dataset_id``.
    """

    dataset_id: Optional[str] = None
    doi: Optional[str] = None
    persistent_id: Optional[str] = None

    def has_identifier(self) -> bool:
        return any((self.dataset_id, self.doi, self.persistent_id))


class Author(ProviderSchema):
    name: str
    affiliation: Optional[str] = None
    orcid: Optional[str] = None


class DatasetFile(ProviderSchema):
    name: str
    size: int = 0
    content_type: str = "application/octet-stream"
    checksum: str = ""


class Funding(ProviderSchema):
    agency: str
    grant: str = ""


class Coordinates(ProviderSchema):
    lat: float
    lng: float


class GeographicCoverage(ProviderSchema):
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class TimePeriod(ProviderSchema):
    start: Optional[str] = None
    end: Optional[str] = None


class DatasetMetadata(ProviderSchema):
    id: str
    title: str
    description: str = ""
    authors: List[Author] = Field(default_factory=list)
    subjects: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    publication_date: str = ""
    version: str = ""
    license: Optional[str] = None
    doi: Optional[str] = None
    files: List[DatasetFile] = Field(default_factory=list)
    citations: Optional[List[str]] = None
    funding: Optional[List[Funding]] = None
    geographic_coverage: Optional[GeographicCoverage] = None
    time_period_covered: Optional[TimePeriod] = None


# =====================================================================
# Enrichment
# =====================================================================


class EnrichmentOptions(ProviderSchema):
    cultural_context: bool = False
    multilingual_processing: bool = False
    gdpr_compliance: bool = False
    sensitivity_check: bool = False
    quality_assessment: bool = False


class CulturalContext(ProviderSchema):
    significance: str = ""
    cultural_categories: List[str] = Field(default_factory=list)
    community_relevance: str = ""
    historical_importance: str = ""
    sensitive_practices: List[str] = Field(default_factory=list)


class QualityAssessment(ProviderSchema):
    completeness_score: float = Field(default=50, description="0-100")
    consistency_score: float = Field(default=50, description="0-100")
    accuracy_score: float = Field(default=50, description="0-100")
    recommendations: List[str] = Field(default_factory=list)


class SemanticEntity(ProviderSchema):
    text: str
    type: str
    confidence: float = 0.0


class SemanticTags(ProviderSchema):
    entities: List[SemanticEntity] = Field(default_factory=list)
    concepts: List[str] = Field(default_factory=list)
    themes: List[str] = Field(default_factory=list)


class GDPRCompliance(ProviderSchema):
    personal_data_detected: bool = False
    personal_data_types: List[str] = Field(default_factory=list)
    processing_purposes: List[str] = Field(default_factory=list)
    legal_basis: str = "Unknown"
    retention_period: str = "Not specified"
    risks: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class SensitivityAssessment(ProviderSchema):
    sensitive_content_detected: bool = False
    categories: List[str] = Field(default_factory=list)
    restricted_access_recommended: bool = False
    recommendations: List[str] = Field(default_factory=list)


class Translation(ProviderSchema):
    title: str
    description: str = ""
    keywords: List[str] = Field(default_factory=list)


class Enrichment(ProviderSchema):
    cultural_context: Optional[CulturalContext] = None
    quality_assessment: Optional[QualityAssessment] = None
    semantic_tags: Optional[SemanticTags] = None
    gdpr_compliance: Optional[GDPRCompliance] = None
    sensitivity: Optional[SensitivityAssessment] = None
    translations: Optional[Dict[str, Translation]] = None

    def requested_keys(self) -> List[str]:
        return [name for name, value in self if value is not None]


class EnrichRequest(ProviderSchema):
    metadata: DatasetMetadata
    options: EnrichmentOptions = Field(default_factory=EnrichmentOptions)


class EnrichedMetadata(DatasetMetadata):
    enrichment: Enrichment = Field(default_factory=Enrichment)


# =====================================================================
# Identity issuance
# =====================================================================


class IssuanceOptions(ProviderSchema):
    publish_to_dkg: bool = Field(default=False, alias="publishToDKG")
    expiration_days: int = Field(default=365, ge=1)
    credential_type: str = "DatasetCredential"


class IssueRequest(ProviderSchema):
    enriched_metadata: EnrichedMetadata
    options: IssuanceOptions = Field(default_factory=IssuanceOptions)
    harvested_at: Optional[datetime] = None
    enriched_at: Optional[datetime] = None


class VerificationMethod(ProviderSchema):
    id: str
    type: str
    controller: str
    public_key_multibase: Optional[str] = None


class ServiceEndpoint(ProviderSchema):
    id: str
    type: str
    service_endpoint: str


class DIDDocument(ProviderSchema):
    context: List[str] = Field(alias="@context")
    id: str
    verification_method: List[VerificationMethod]
    authentication: List[str]
    assertion_method: List[str]
    service: List[ServiceEndpoint] = Field(default_factory=list)


class CredentialIssuer(ProviderSchema):
    id: str
    name: str
    type: str = "Organization"


class Proof(ProviderSchema):
    type: str
    created: str
    verification_method: str
    proof_purpose: str
    jws: str


class VerifiableCredential(ProviderSchema):
    context: List[str] = Field(alias="@context")
    id: str
    type: List[str]
    issuer: CredentialIssuer
    issuance_date: str
    expiration_date: Optional[str] = None
    credential_subject: Dict[str, Any]
    proof: Proof


class Provenance(ProviderSchema):
    source_dataset: str
    harvest_timestamp: str
    enrichment_timestamp: str
    issuance_timestamp: str
    processing_steps: List[str]


class DIDCreationResult(ProviderSchema):
    did: str
    did_document: DIDDocument
    verifiable_credential: VerifiableCredential
    dkg_knowledge_asset_id: Optional[str] = None
    provenance: Provenance
