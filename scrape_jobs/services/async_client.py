"""
Client for the scraping provider's asynchronous (push-pull) queries API.

A scrape is submitted once; the returned job is then polled in a background
task and its results are decoded when it is done. ``scrape`` only returns
after submission succeeded, so submission errors are raised directly while
every later error arrives through the returned ``ScrapeResultHandle``.
"""
import asyncio
import json
import logging
from typing import Any, Mapping, Optional, Set, Union

import httpx

from scrape_jobs.core.config import Settings, get_settings
from scrape_jobs.schemas.results import DecodedResponse
from scrape_jobs.services.job_submitter import submit_job
from scrape_jobs.services.result_handle import ScrapeResultHandle
from scrape_jobs.services.status_poller import JobPoller, PollConfig
from scrape_jobs.services.transport import ApiTransport

logger = logging.getLogger(__name__)

Payload = Union[bytes, str, Mapping[str, Any]]


def has_parsing_instructions(payload: Payload) -> bool:
    """Whether a mapping payload carries custom ``parsing_instructions``."""
    return isinstance(payload, Mapping) and payload.get("parsing_instructions") is not None


def wants_parse(payload: Payload) -> bool:
    return isinstance(payload, Mapping) and bool(payload.get("parse"))


def serialize_payload(payload: Payload) -> Union[bytes, str]:
    if isinstance(payload, Mapping):
        return json.dumps(dict(payload))
    return payload


class AsyncScrapeClient:
    def __init__(
        self,
        username: str,
        password: str,
        *,
        base_url: Optional[str] = None,
        status_url: Optional[str] = None,
        results_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = base_url or self.settings.base_url
        self.status_url = status_url or self.settings.resolved_status_url()
        self.results_url = results_url or self.settings.resolved_results_url()
        timeout = httpx.Timeout(
            self.settings.request_timeout_seconds,
            connect=self.settings.connect_timeout_seconds,
        )
        self.transport = ApiTransport(username, password, http_client=http_client, timeout=timeout)
        self._tasks: Set["asyncio.Task[DecodedResponse]"] = set()
        self._cancel_events: Set[asyncio.Event] = set()

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, *, http_client: Optional[httpx.AsyncClient] = None
    ) -> "AsyncScrapeClient":
        settings = settings or get_settings()
        if not settings.api_username or not settings.api_password:
            raise ValueError("SCRAPER_API_USERNAME and SCRAPER_API_PASSWORD must be set")
        return cls(settings.api_username, settings.api_password, http_client=http_client, settings=settings)

    async def __aenter__(self) -> "AsyncScrapeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop pending jobs and close the HTTP client if this instance created it."""
        for event in list(self._cancel_events):
            event.set()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.transport.aclose()

    def poll_config(
        self,
        *,
        parse: bool,
        custom_parse_instructions: bool,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
    ) -> PollConfig:
        return PollConfig.build(
            interval=poll_interval or self.settings.poll_interval_seconds,
            timeout=timeout or self.settings.poll_timeout_seconds,
            deadline=deadline,
            parse=parse,
            custom_parse_instructions=custom_parse_instructions,
        )

    async def scrape(
        self,
        payload: Payload,
        *,
        parse: Optional[bool] = None,
        custom_parse_instructions: Optional[bool] = None,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScrapeResultHandle:
        """
        Submit a scrape job and start polling it in the background.

        Args:
            payload: Serialized JSON body, or a mapping that is serialized here.
            parse: Whether results are parsed. Read from ``payload["parse"]`` when omitted.
            custom_parse_instructions: Whether parsed results follow caller-supplied
                parsing instructions. Inferred from ``payload["parsing_instructions"]`` when omitted.
            poll_interval: Seconds between status checks (default 2).
            timeout: Overall polling timeout in seconds, used when ``deadline`` is not given (default 50).
            deadline: Absolute deadline on the running loop's clock (``loop.time()``).
            cancel_event: External cancellation signal; setting it stops polling.

        Returns:
            A handle that yields the decoded response or raises the first error.
        """
        if parse is None:
            parse = wants_parse(payload)
        if custom_parse_instructions is None:
            custom_parse_instructions = has_parsing_instructions(payload)
        config = self.poll_config(
            parse=parse,
            custom_parse_instructions=custom_parse_instructions,
            poll_interval=poll_interval,
            timeout=timeout,
            deadline=deadline,
        )

        job_id = await submit_job(self.transport, self.base_url, serialize_payload(payload))

        if cancel_event is None:
            cancel_event = asyncio.Event()
        poller = JobPoller(
            self.transport,
            job_id,
            config,
            status_url=self.status_url,
            results_url=self.results_url,
            cancel_event=cancel_event,
        )
        task = asyncio.create_task(poller.run(), name=f"scrape-job-{job_id}")
        self._tasks.add(task)
        self._cancel_events.add(cancel_event)

        def _forget(done: "asyncio.Task[DecodedResponse]") -> None:
            self._tasks.discard(done)
            self._cancel_events.discard(cancel_event)

        task.add_done_callback(_forget)
        logger.info(
            "Scrape job polling started: job_id=%s, shape=%s, interval=%.2fs",
            job_id,
            config.shape.value,
            config.interval,
        )
        return ScrapeResultHandle(poller, task, cancel_event)

    async def scrape_and_wait(self, payload: Payload, **kwargs: Any) -> DecodedResponse:
        handle = await self.scrape(payload, **kwargs)
        return await handle
