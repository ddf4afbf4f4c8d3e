"""Decentralized identifier and verifiable credential issuer provider."""

from __future__ import annotations

import base64
import hashlib
import json
import secrets
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ..agent_core.capabilities.base import ExecutionContext
from ..agent_core.errors import ProviderExecutionError
from ..agent_core.schemas.domain import ProviderName
from .schemas import (
    CredentialIssuer,
    DIDCreationResult,
    DIDDocument,
    EnrichedMetadata,
    IssuanceOptions,
    IssueRequest,
    Proof,
    Provenance,
    ServiceEndpoint,
    VerifiableCredential,
    VerificationMethod,
)

DID_CONTEXT = [
    "https://www.w3.org/ns/did/v1",
    "https://w3id.org/security/suites/ed25519-2020/v1",
]
VC_CONTEXT = [
    "https://www.w3.org/2018/credentials/v1",
    "https://schema.org",
    "https://w3id.org/security/suites/ed25519-2020/v1",
]
PROCESSING_STEPS = [
    "dataverse-harvest",
    "metadata-extraction",
    "ai-enrichment",
    "gdpr-analysis",
    "did-creation",
    "vc-issuance",
]

# ExecutionContext.state key mapping asset id to a compact publication record.
# One entry per published dataset, kept until the agent is cleaned up.
DKG_ASSETS_STATE_KEY = "dkg_assets"


def generate_did() -> str:
    return f"did:key:z6Mk{uuid.uuid4().hex}"


def _b64url(data: Dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class DIDIssuerProvider:
    """
    Provider minting a dataset DID, its DID document and a verifiable credential.

    Signatures and public keys are opaque placeholders; no key material is
    generated or verified.
    """

    name = ProviderName.did_issuer.value
    version = "1.0.0"
    description = "Issues W3C DIDs and Verifiable Credentials for enriched datasets"

    def __init__(self) -> None:
        self._issuer_did: Optional[str] = None
        self._issuer_name = "HeliXID Metadata Agent"
        self._service_base_url = "https://api.helixid.xyz/datasets"

    @property
    def issuer_did(self) -> Optional[str]:
        return self._issuer_did

    async def initialize(self, ctx: ExecutionContext) -> None:
        issuer = ctx.config.issuer
        self._issuer_did = issuer.did or f"did:ethr:0x{secrets.token_hex(20)}"
        self._issuer_name = issuer.name
        self._service_base_url = issuer.service_base_url.rstrip("/")
        ctx.logger.info(
            f"DID Issuer initialized: issuer_did={self._issuer_did}, has_private_key={bool(issuer.private_key)}"
        )

    async def execute(self, payload: Any, ctx: ExecutionContext) -> DIDCreationResult:
        """
        Issue a DID and credential for one enriched dataset.

        Args:
            payload: ``IssueRequest`` or a mapping with ``enrichedMetadata`` and optional ``options``.
            ctx: The execution context.

        Returns:
            DIDCreationResult with the DID document, credential, provenance and,
            when published, the knowledge asset id.

        Raises:
            ProviderExecutionError: If the payload is invalid or issuance fails.
        """
        start = time.perf_counter()
        try:
            request = IssueRequest.model_validate(payload)
            metadata, options = request.enriched_metadata, request.options
            ctx.logger.info(
                f"Starting DID and VC creation: dataset={metadata.id}, title={metadata.title!r}, "
                f"options={options.model_dump(by_alias=True)}"
            )

            did = generate_did()
            now = datetime.now(timezone.utc)
            did_document = self._did_document(did, metadata)
            credential = self._credential(did, metadata, options, now)
            provenance = Provenance(
                source_dataset=metadata.id,
                harvest_timestamp=_iso(request.harvested_at or now),
                enrichment_timestamp=_iso(request.enriched_at or now),
                issuance_timestamp=_iso(now),
                processing_steps=list(PROCESSING_STEPS),
            )

            asset_id = None
            if options.publish_to_dkg and ctx.config.dkg is not None:
                asset_id = self._publish_knowledge_asset(did_document, credential, metadata, ctx, now)

            result = DIDCreationResult(
                did=did,
                did_document=did_document,
                verifiable_credential=credential,
                dkg_knowledge_asset_id=asset_id,
                provenance=provenance,
            )
        except Exception as e:
            duration = (time.perf_counter() - start) * 1000.0
            ctx.metrics.timing("did.creation.duration", duration)
            ctx.metrics.increment("did.creation.error")
            ctx.logger.error(f"DID and VC creation failed after {duration:.2f}ms: {e}")
            raise ProviderExecutionError("DID creation", str(e) or e.__class__.__name__) from e

        duration = (time.perf_counter() - start) * 1000.0
        ctx.metrics.timing("did.creation.duration", duration)
        ctx.metrics.increment("did.creation.success")
        ctx.logger.info(
            f"DID and VC creation completed: did={result.did}, vc={credential.id}, "
            f"dkg_asset={asset_id}, duration={duration:.2f}ms"
        )
        return result

    def _did_document(self, did: str, metadata: EnrichedMetadata) -> DIDDocument:
        key_id = f"{did}#key-1"
        return DIDDocument(
            context=list(DID_CONTEXT),
            id=did,
            verification_method=[
                VerificationMethod(
                    id=key_id,
                    type="Ed25519VerificationKey2020",
                    controller=did,
                    public_key_multibase=f"z6Mk{secrets.token_hex(22)}",
                )
            ],
            authentication=[key_id],
            assertion_method=[key_id],
            service=[
                ServiceEndpoint(
                    id=f"{did}#dataset-service",
                    type="DatasetService",
                    service_endpoint=f"{self._service_base_url}/{metadata.id}",
                )
            ],
        )

    def _credential(
        self,
        did: str,
        metadata: EnrichedMetadata,
        options: IssuanceOptions,
        now: datetime,
    ) -> VerifiableCredential:
        subject = metadata.model_dump(by_alias=True, mode="json", exclude={"id"}, exclude_none=True)
        subject = {"id": did, "type": "Dataset", "datasetId": metadata.id, **subject}

        issuer_did = self._issuer_did or ""
        return VerifiableCredential(
            context=list(VC_CONTEXT),
            id=f"urn:uuid:{uuid.uuid4()}",
            type=["VerifiableCredential", options.credential_type],
            issuer=CredentialIssuer(id=issuer_did, name=self._issuer_name),
            issuance_date=_iso(now),
            expiration_date=_iso(now + timedelta(days=options.expiration_days)),
            credential_subject=subject,
            proof=Proof(
                type="Ed25519Signature2020",
                created=_iso(now),
                verification_method=f"{issuer_did}#key-1",
                proof_purpose="assertionMethod",
                jws=self._placeholder_jws(did, now),
            ),
        )

    @staticmethod
    def _placeholder_jws(subject: str, now: datetime) -> str:
        header = _b64url({"alg": "EdDSA", "typ": "JWT"})
        body = _b64url({"sub": subject, "iat": int(now.timestamp())})
        return f"{header}.{body}.{secrets.token_urlsafe(32)}"

    def _publish_knowledge_asset(
        self,
        did_document: DIDDocument,
        credential: VerifiableCredential,
        metadata: EnrichedMetadata,
        ctx: ExecutionContext,
        now: datetime,
    ) -> str:
        asset = {
            "@context": ["https://w3id.org/okn/ra"],
            "@type": "Dataset",
            "@id": did_document.id,
            "dct:title": metadata.title,
            "dct:description": metadata.description,
            "dct:creator": [a.model_dump(by_alias=True, exclude_none=True) for a in metadata.authors],
            "dcat:keyword": metadata.keywords,
            "dcat:theme": metadata.subjects,
            "prov:wasGeneratedBy": {
                "@type": "prov:Activity",
                "prov:startedAtTime": _iso(now),
            },
            "helixid:didDocument": did_document.model_dump(by_alias=True, mode="json"),
            "helixid:verifiableCredential": credential.model_dump(by_alias=True, mode="json"),
            "helixid:enrichment": metadata.enrichment.model_dump(by_alias=True, mode="json", exclude_none=True),
        }
        digest = hashlib.sha256(json.dumps(asset, sort_keys=True).encode("utf-8")).hexdigest()
        asset_id = f"0x{digest}"

        ctx.state.setdefault(DKG_ASSETS_STATE_KEY, {})[asset_id] = {
            "did": did_document.id,
            "title": metadata.title,
            "nodeUrl": ctx.config.dkg.node_url,
            "publishedAt": _iso(now),
        }
        ctx.logger.info(
            f"Published knowledge asset: asset_id={asset_id}, node={ctx.config.dkg.node_url}, "
            f"title={metadata.title!r}"
        )
        return asset_id
