import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import httpx
import pytest

from scrape_jobs.core.config import Settings
from scrape_jobs.services.async_client import AsyncScrapeClient
from scrape_jobs.services.transport import ApiTransport

BASE_URL = "https://api.test/v1/queries"


def raw_results_body(job_id: str = "7x1") -> str:
    return json.dumps(
        {
            "results": [
                {"content": "hi", "page": 1, "url": "http://x", "job_id": job_id, "status_code": 200},
            ],
            "job": {"id": job_id, "status": "done"},
        }
    )


class FakeQueriesApi:
    """Scripted stand-in for the queries API behind an ``httpx.MockTransport``."""

    def __init__(
        self,
        job_id: str = "7x1",
        statuses: Sequence[str] = ("done",),
        results_body: Optional[str] = None,
        results_status: int = 200,
        submit_status: int = 200,
        submit_body: Optional[str] = None,
        status_error: Optional[Callable[[httpx.Request], Exception]] = None,
        status_code: int = 200,
        status_body: Optional[str] = None,
        status_extra: Optional[Dict[str, Any]] = None,
    ):
        self.job_id = job_id
        self.statuses = list(statuses)
        self.results_body = results_body if results_body is not None else raw_results_body(job_id)
        self.results_status = results_status
        self.submit_status = submit_status
        self.submit_body = submit_body
        self.status_error = status_error
        self.status_code = status_code
        self.status_body = status_body
        self.status_extra = status_extra or {}
        self.calls: List[Tuple[str, str]] = []
        self.requests: List[httpx.Request] = []
        self._status_idx = 0

    @property
    def status_calls(self) -> int:
        return sum(1 for method, path in self.calls if method == "GET" and not path.endswith("/results"))

    @property
    def results_calls(self) -> int:
        return sum(1 for method, path in self.calls if path.endswith("/results"))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        self.requests.append(request)

        if request.method == "POST":
            if self.submit_body is not None:
                return httpx.Response(self.submit_status, text=self.submit_body)
            return httpx.Response(self.submit_status, json={"id": self.job_id, "status": "pending"})

        if request.url.path.endswith("/results"):
            return httpx.Response(self.results_status, text=self.results_body)

        if self.status_error is not None:
            raise self.status_error(request)
        if self.status_body is not None:
            return httpx.Response(self.status_code, text=self.status_body)
        status = self.statuses[min(self._status_idx, len(self.statuses) - 1)]
        self._status_idx += 1
        return httpx.Response(self.status_code, json={**self.status_extra, "id": self.job_id, "status": status})

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        SCRAPER_API_USERNAME="user",
        SCRAPER_API_PASSWORD="pass",
        SCRAPER_API_BASE_URL=BASE_URL,
        SCRAPER_POLL_INTERVAL_SECONDS=0.01,
        SCRAPER_POLL_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def make_client(settings):
    def _make(api: FakeQueriesApi) -> AsyncScrapeClient:
        return AsyncScrapeClient("user", "pass", http_client=api.http_client(), settings=settings)

    return _make


@pytest.fixture
def make_transport():
    def _make(api: FakeQueriesApi) -> ApiTransport:
        return ApiTransport("user", "pass", http_client=api.http_client())

    return _make


@pytest.fixture
def fake_api():
    return FakeQueriesApi
