"""Dataverse metadata harvester provider.

Resolves one dataset on a Dataverse installation and returns its citation
metadata and latest-version file list as a ``DatasetMetadata``.

Identifier precedence when several are supplied: ``doi``, then
``persistent_id``, then ``dataset_id``.
"""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..agent_core.capabilities.base import ExecutionContext
from ..agent_core.errors import InitializationError, ProviderExecutionError
from ..agent_core.schemas.domain import ProviderName
from ..core.config import DataverseConfig
from .schemas import (
    Author,
    Coordinates,
    DatasetFile,
    DatasetMetadata,
    Funding,
    GeographicCoverage,
    HarvestRequest,
    TimePeriod,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Dataverse-key"

# leading decimal number of a free-text value, e.g. "-77.0 W"
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _find_field(fields: List[Dict[str, Any]], type_name: str) -> Optional[Dict[str, Any]]:
    return next((f for f in fields if f.get("typeName") == type_name), None)


def _field_value(fields: List[Dict[str, Any]], type_name: str) -> Any:
    field = _find_field(fields, type_name)
    return field.get("value") if field else None


def _compound(entry: Any, key: str) -> Optional[str]:
    if not isinstance(entry, dict):
        return None
    sub = entry.get(key)
    if isinstance(sub, dict):
        value = sub.get("value")
        return str(value) if value not in (None, "") else None
    return None


def extract_metadata(dataset: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Dataverse dataset JSON object to ``DatasetMetadata`` fields (without files)."""
    latest = dataset.get("latestVersion") or dataset
    blocks = latest.get("metadataBlocks") or {}
    citation = (blocks.get("citation") or {}).get("fields") or []

    title = _field_value(citation, "title") or "Untitled Dataset"

    descriptions = _field_value(citation, "dsDescription") or []
    description = _compound(descriptions[0], "dsDescriptionValue") if descriptions else None

    subjects = list(_field_value(citation, "subject") or [])
    keywords = [k for k in (_compound(e, "keywordValue") for e in _field_value(citation, "keyword") or []) if k]

    authors = [
        Author(
            name=_compound(a, "authorName") or "",
            affiliation=_compound(a, "authorAffiliation"),
            orcid=_compound(a, "authorIdentifier"),
        )
        for a in _field_value(citation, "author") or []
    ]

    publication_date = (
        _field_value(citation, "productionDate")
        or _field_value(citation, "distributionDate")
        or latest.get("releaseTime")
        or datetime.now(timezone.utc).isoformat()
    )

    license_info = latest.get("license")
    license_name = license_info.get("name") if isinstance(license_info, dict) else license_info

    doi = None
    if dataset.get("protocol") and dataset.get("authority") and dataset.get("identifier"):
        doi = f"{dataset['protocol']}:{dataset['authority']}/{dataset['identifier']}"

    major = latest.get("versionNumber")
    minor = latest.get("versionMinorNumber")
    version = f"{major}.{minor or 0}" if major is not None else "DRAFT"

    return {
        "id": str(dataset.get("id", "")),
        "title": title,
        "description": description or "",
        "authors": authors,
        "subjects": subjects,
        "keywords": keywords,
        "publication_date": str(publication_date),
        "version": version,
        "license": license_name,
        "doi": doi,
        "geographic_coverage": extract_geographic_coverage(blocks),
        "time_period_covered": extract_time_period(citation),
        "funding": extract_funding(citation),
    }


def _leading_float(value: Any) -> Optional[float]:
    match = _LEADING_NUMBER.match(str(value))
    return float(match.group(0)) if match else None


def extract_geographic_coverage(blocks: Dict[str, Any]) -> Optional[GeographicCoverage]:
    geospatial = (blocks.get("geospatial") or {}).get("fields") or []
    values = _field_value(geospatial, "geographicCoverage") or []
    if not values:
        return None

    coverage = values[0]
    coordinates = None
    west = _compound(coverage, "westLongitude")
    north = _compound(coverage, "northLatitude")
    if west and north:
        lat, lng = _leading_float(north), _leading_float(west)
        if lat is None or lng is None:
            logger.warning(f"Ignoring unparseable coordinates: northLatitude={north!r}, westLongitude={west!r}")
        else:
            coordinates = Coordinates(lat=lat, lng=lng)
    return GeographicCoverage(
        country=_compound(coverage, "country"),
        state=_compound(coverage, "state"),
        city=_compound(coverage, "city"),
        coordinates=coordinates,
    )


def extract_time_period(citation: List[Dict[str, Any]]) -> Optional[TimePeriod]:
    values = _field_value(citation, "timePeriodCovered") or []
    if not values:
        return None
    period = values[0]
    return TimePeriod(
        start=_compound(period, "timePeriodCoveredStart"),
        end=_compound(period, "timePeriodCoveredEnd"),
    )


def extract_funding(citation: List[Dict[str, Any]]) -> Optional[List[Funding]]:
    values = _field_value(citation, "grantNumber") or []
    if not values:
        return None
    return [
        Funding(
            agency=_compound(grant, "grantNumberAgency") or "Unknown Agency",
            grant=_compound(grant, "grantNumberValue") or "",
        )
        for grant in values
    ]


def extract_files(files: List[Dict[str, Any]]) -> List[DatasetFile]:
    result: List[DatasetFile] = []
    for entry in files or []:
        data_file = entry.get("dataFile") or {}
        checksum = data_file.get("checksum") or entry.get("checksum") or ""
        if isinstance(checksum, dict):
            checksum = checksum.get("value") or ""
        result.append(
            DatasetFile(
                name=data_file.get("filename") or entry.get("filename") or entry.get("label") or "unknown",
                size=int(data_file.get("filesize") or entry.get("filesize") or 0),
                content_type=data_file.get("contentType") or entry.get("contentType") or "application/octet-stream",
                checksum=str(checksum),
            )
        )
    return result


class DataverseHarvesterProvider:
    """
    Provider harvesting dataset metadata from a Dataverse repository.

    Requires ``AgentConfig.dataverse``. An ``httpx.AsyncClient`` may be injected
    (tests pass one built on ``httpx.MockTransport``); otherwise the provider
    creates its own at ``initialize`` and closes it at ``cleanup``.
    """

    name = ProviderName.dataverse_harvester.value
    version = "1.0.0"
    description = "Harvests metadata and files from Dataverse repositories"

    def __init__(self, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client
        self._owns_client = client is None
        self._config: Optional[DataverseConfig] = None

    async def initialize(self, ctx: ExecutionContext) -> None:
        cfg = ctx.config.dataverse
        if cfg is None:
            raise InitializationError(self.name, "Dataverse configuration is required")

        self._config = cfg
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=cfg.timeout)
            self._owns_client = True

        ctx.logger.info(
            f"Dataverse Harvester initialized: api_url={cfg.api_url}, has_api_key={bool(cfg.api_key)}"
        )

    async def execute(self, payload: Any, ctx: ExecutionContext) -> DatasetMetadata:
        """
        Harvest one dataset.

        Args:
            payload: ``HarvestRequest`` or a mapping with ``datasetId`` / ``doi`` / ``persistentId``.
            ctx: The execution context.

        Returns:
            DatasetMetadata for the resolved dataset, including its file list.

        Raises:
            ProviderExecutionError: If no identifier is given or the repository call fails.
        """
        start = time.perf_counter()
        try:
            request = HarvestRequest.model_validate(payload or {})
            ctx.logger.info(f"Starting Dataverse harvest: {request.model_dump(exclude_none=True)}")

            dataset_url, files_url, params = self._endpoints(request)

            logger.debug(f"Fetching dataset metadata: {dataset_url} {params}")
            dataset = await self._get_data(dataset_url, params)
            fields = extract_metadata(dataset)

            logger.debug(f"Fetching file information: {files_url}")
            files = extract_files(await self._get_data(files_url, params))

            result = DatasetMetadata(**fields, files=files)
        except Exception as e:
            duration = (time.perf_counter() - start) * 1000.0
            ctx.metrics.timing("dataverse.harvest.duration", duration)
            ctx.metrics.increment("dataverse.harvest.error")
            ctx.logger.error(f"Dataverse harvest failed after {duration:.2f}ms: {e}")
            raise ProviderExecutionError("Dataverse harvest", str(e) or e.__class__.__name__) from e

        duration = (time.perf_counter() - start) * 1000.0
        ctx.metrics.timing("dataverse.harvest.duration", duration)
        ctx.metrics.increment("dataverse.harvest.success")
        ctx.logger.info(
            f"Dataverse harvest completed: id={result.id}, title={result.title!r}, "
            f"files={len(result.files)}, duration={duration:.2f}ms"
        )
        return result

    def _endpoints(self, request: HarvestRequest) -> Tuple[str, str, Dict[str, str]]:
        if self._config is None:
            raise RuntimeError("Dataverse harvester is not initialized")
        base = self._config.api_url.rstrip("/")

        persistent_id: Optional[str] = None
        if request.doi:
            persistent_id = request.doi if request.doi.startswith("doi:") else f"doi:{request.doi}"
        elif request.persistent_id:
            persistent_id = request.persistent_id

        if persistent_id is not None:
            return (
                f"{base}/api/datasets/:persistentId/",
                f"{base}/api/datasets/:persistentId/versions/:latest/files",
                {"persistentId": persistent_id},
            )
        if request.dataset_id:
            return (
                f"{base}/api/datasets/{request.dataset_id}",
                f"{base}/api/datasets/{request.dataset_id}/versions/:latest/files",
                {},
            )
        raise ValueError("Either datasetId, doi, or persistentId must be provided")

    async def _get_data(self, url: str, params: Dict[str, str]) -> Any:
        if self._client is None or self._config is None:
            raise RuntimeError("Dataverse harvester is not initialized")
        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers[API_KEY_HEADER] = self._config.api_key
        response = await self._client.get(url, params=params or None, headers=headers)
        response.raise_for_status()
        body = response.json()
        if body.get("status") not in (None, "OK"):
            raise ValueError(f"Dataverse returned status {body.get('status')}: {body.get('message')}")
        return body.get("data")

    async def cleanup(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
