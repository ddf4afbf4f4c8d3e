from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import httpx
import pytest

from bioagents.agent_core.capabilities.base import ExecutionContext
from bioagents.agent_core.metrics import InMemoryMetricsCollector
from bioagents.core.config import AgentConfig, DataverseConfig, DKGConfig

MOCK_DATAVERSE_URL = "http://mock-dataverse.test"


class RecordingProvider:
    """Configurable provider double.

    ``result`` is returned from ``execute`` (called with ``(payload, ctx)`` when
    callable); ``error`` is raised instead when set.
    """

    def __init__(
        self,
        name: str,
        *,
        version: str = "1.0.0",
        description: str = "",
        result: Any = None,
        error: Optional[BaseException] = None,
        init_error: Optional[BaseException] = None,
        cleanup_error: Optional[BaseException] = None,
    ) -> None:
        self.name = name
        self.version = version
        self.description = description
        self.result = result
        self.error = error
        self.init_error = init_error
        self.cleanup_error = cleanup_error
        self.calls: List[Any] = []
        self.initialized = 0
        self.cleaned_up = 0

    async def initialize(self, ctx: ExecutionContext) -> None:
        self.initialized += 1
        if self.init_error is not None:
            raise self.init_error

    async def execute(self, payload: Any, ctx: ExecutionContext) -> Any:
        self.calls.append(payload)
        if self.error is not None:
            raise self.error
        if callable(self.result):
            return self.result(payload, ctx)
        return self.result

    async def cleanup(self) -> None:
        self.cleaned_up += 1
        if self.cleanup_error is not None:
            raise self.cleanup_error


@pytest.fixture
def make_provider():
    return RecordingProvider


@pytest.fixture
def metrics() -> InMemoryMetricsCollector:
    return InMemoryMetricsCollector()


@pytest.fixture
def agent_config() -> AgentConfig:
    return AgentConfig(
        dataverse=DataverseConfig(api_url=MOCK_DATAVERSE_URL, api_key="dv-token"),
        dkg=DKGConfig(node_url="http://mock-dkg.test"),
    )


@pytest.fixture
def dataverse_dataset() -> Dict[str, Any]:
    """Dataverse ``GET /api/datasets/...`` ``data`` object for a small heritage dataset."""
    return {
        "id": 42,
        "protocol": "doi",
        "authority": "10.5072",
        "identifier": "FK2/ABC123",
        "latestVersion": {
            "versionNumber": 2,
            "versionMinorNumber": 1,
            "releaseTime": "2023-05-01T10:00:00Z",
            "license": {"name": "CC BY 4.0"},
            "metadataBlocks": {
                "citation": {
                    "fields": [
                        {"typeName": "title", "value": "Oral Histories of the Danube Delta"},
                        {
                            "typeName": "dsDescription",
                            "value": [{"dsDescriptionValue": {"value": "Interviews with fishing communities."}}],
                        },
                        {"typeName": "subject", "value": ["Arts and Humanities", "Social Sciences"]},
                        {
                            "typeName": "keyword",
                            "value": [
                                {"keywordValue": {"value": "oral history"}},
                                {"keywordValue": {"value": "fishing"}},
                            ],
                        },
                        {
                            "typeName": "author",
                            "value": [
                                {
                                    "authorName": {"value": "Popescu, Ana"},
                                    "authorAffiliation": {"value": "University of Bucharest"},
                                    "authorIdentifier": {"value": "0000-0002-1825-0097"},
                                }
                            ],
                        },
                        {"typeName": "productionDate", "value": "2022-11-15"},
                        {
                            "typeName": "timePeriodCovered",
                            "value": [
                                {
                                    "timePeriodCoveredStart": {"value": "1950"},
                                    "timePeriodCoveredEnd": {"value": "1990"},
                                }
                            ],
                        },
                        {
                            "typeName": "grantNumber",
                            "value": [
                                {
                                    "grantNumberAgency": {"value": "European Research Council"},
                                    "grantNumberValue": {"value": "ERC-123"},
                                }
                            ],
                        },
                    ]
                },
                "geospatial": {
                    "fields": [
                        {
                            "typeName": "geographicCoverage",
                            "value": [{"country": {"value": "Romania"}, "city": {"value": "Tulcea"}}],
                        }
                    ]
                },
            },
        },
    }


@pytest.fixture
def dataverse_files() -> List[Dict[str, Any]]:
    return [
        {
            "label": "interviews.csv",
            "dataFile": {
                "filename": "interviews.csv",
                "filesize": 2048,
                "contentType": "text/csv",
                "checksum": {"type": "MD5", "value": "abc123"},
            },
        }
    ]


@pytest.fixture
def dataverse_transport(dataverse_dataset, dataverse_files):
    """MockTransport serving the dataset fixtures; requests are collected on ``transport.requests``."""
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/versions/:latest/files"):
            return httpx.Response(200, json={"status": "OK", "data": dataverse_files})
        if request.url.path.startswith("/api/datasets/"):
            return httpx.Response(200, json={"status": "OK", "data": dataverse_dataset})
        return httpx.Response(404, json={"status": "ERROR", "message": "not found"})

    transport = httpx.MockTransport(handler)
    transport.requests = requests  # type: ignore[attr-defined]
    return transport


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
