"""HTTP transport for the queries API.

One shared ``httpx.AsyncClient`` carries every call of a client. Each call
issues a single request, reads the whole body and returns it; network and
read failures are translated into ``TransportError`` here and nowhere else.
"""
import logging
import platform
from dataclasses import dataclass
from typing import Dict, Optional, Union

import httpx

from scrape_jobs.core.errors import ApiStatusError, TransportError

logger = logging.getLogger(__name__)

SDK_NAME = "scrape-jobs"
SDK_VERSION = "0.1.0"


def sdk_identifier() -> str:
    """Value of the ``x-oxylabs-sdk`` header, e.g. ``scrape-jobs/0.1.0 (python 3.12.4; linux/x86_64)``."""
    return "%s/%s (python %s; %s/%s)" % (
        SDK_NAME,
        SDK_VERSION,
        platform.python_version(),
        platform.system().lower(),
        platform.machine().lower(),
    )


@dataclass(frozen=True)
class ApiResponse:
    status_code: int
    reason: str
    body: str

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason}".strip()

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def raise_for_status(self, *, stage: str, job_id: Optional[str] = None, exact_ok: bool = False) -> None:
        ok = self.status_code == 200 if exact_ok else self.is_success
        if not ok:
            logger.warning(
                "Queries API returned error: stage=%s, job_id=%s, status=%s, body=%s",
                stage,
                job_id,
                self.status_code,
                self.body[:1000],
            )
            raise ApiStatusError(self.status_code, self.body, stage=stage, job_id=job_id)


class ApiTransport:
    """Basic-auth JSON transport over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        username: str,
        password: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[httpx.Timeout] = None,
    ):
        self._auth = httpx.BasicAuth(username, password)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout or httpx.Timeout(30.0, connect=10.0))
        self._headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "x-oxylabs-sdk": sdk_identifier(),
        }

    async def request(
        self,
        method: str,
        url: str,
        *,
        content: Optional[Union[bytes, str]] = None,
        stage: str,
        job_id: Optional[str] = None,
    ) -> ApiResponse:
        try:
            resp = await self._client.request(
                method,
                url,
                content=content,
                headers=self._headers,
                auth=self._auth,
            )
        except httpx.HTTPError as exc:
            logger.warning("Queries API %s %s failed: stage=%s, error=%s", method, url, stage, exc)
            raise TransportError(f"error performing request: {exc}", stage=stage, job_id=job_id) from exc

        try:
            body = resp.text
        except (UnicodeDecodeError, LookupError) as exc:
            raise TransportError(f"error reading response body: {exc}", stage=stage, job_id=job_id) from exc

        return ApiResponse(status_code=resp.status_code, reason=resp.reason_phrase, body=body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
