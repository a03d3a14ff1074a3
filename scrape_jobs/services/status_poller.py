"""Polling of a submitted job until it reaches a terminal state.

The poller moves through ``PollState``::

    submitted -> polling -> done | faulted | timed_out | transport_failed

Each cycle is one status GET followed by either a terminal decision or an
interruptible wait of ``PollConfig.interval`` seconds. Only wall-clock time
bounds the loop: with no explicit deadline the default timeout is counted
from the start of ``run``. There is no cap on the number of attempts.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from scrape_jobs.core.config import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_TIMEOUT_SECONDS
from scrape_jobs.core.errors import DecodeError, JobFaultedError, PollTimeoutError, ScrapeJobError
from scrape_jobs.schemas.job import JobState
from scrape_jobs.schemas.results import DecodedResponse, ResultShape
from scrape_jobs.services.result_fetcher import fetch_results
from scrape_jobs.services.transport import ApiTransport

logger = logging.getLogger(__name__)

STAGE = "poll"


class PollState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    DONE = "done"
    FAULTED = "faulted"
    TIMED_OUT = "timed_out"
    TRANSPORT_FAILED = "transport_failed"


@dataclass(frozen=True)
class PollConfig:
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    timeout: float = DEFAULT_POLL_TIMEOUT_SECONDS
    # Absolute deadline on the event loop clock; overrides ``timeout`` when set.
    deadline: Optional[float] = None
    parse: bool = False
    custom_parse_instructions: bool = False

    @classmethod
    def build(
        cls,
        *,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
        parse: bool = False,
        custom_parse_instructions: bool = False,
    ) -> "PollConfig":
        """Resolve unset or zero values to the defaults."""
        return cls(
            interval=interval if interval and interval > 0 else DEFAULT_POLL_INTERVAL_SECONDS,
            timeout=timeout if timeout and timeout > 0 else DEFAULT_POLL_TIMEOUT_SECONDS,
            deadline=deadline,
            parse=parse,
            custom_parse_instructions=custom_parse_instructions,
        )

    @property
    def shape(self) -> ResultShape:
        return ResultShape.from_flags(self.parse, self.custom_parse_instructions)


def status_endpoint(status_url: str, job_id: str) -> str:
    return f"{status_url.rstrip('/')}/{job_id}"


class JobPoller:
    def __init__(
        self,
        transport: ApiTransport,
        job_id: str,
        config: PollConfig,
        *,
        status_url: str,
        results_url: str,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.transport = transport
        self.job_id = job_id
        self.config = config
        self.status_url = status_url
        self.results_url = results_url
        self.cancel_event = cancel_event
        self.state = PollState.SUBMITTED
        self.attempts = 0
        self.last_job: Optional[JobState] = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    async def run(self) -> DecodedResponse:
        """Poll until done and return the decoded results, or raise the terminal error."""
        loop = asyncio.get_running_loop()
        deadline = self.config.deadline
        if deadline is None:
            deadline = loop.time() + self.config.timeout

        while True:
            self._transition(PollState.POLLING)
            job = await self._check_status()

            if job.is_done:
                self._transition(PollState.DONE)
                return await fetch_results(self.transport, self.results_url, self.job_id, self.config.shape)
            if job.is_faulted:
                self._transition(PollState.FAULTED)
                logger.warning("Scrape job faulted: job_id=%s, attempts=%d", self.job_id, self.attempts)
                raise JobFaultedError(job_id=self.job_id)

            if self.cancelled or loop.time() >= deadline:
                self._transition(PollState.TIMED_OUT)
                logger.warning(
                    "Scrape job polling stopped: job_id=%s, attempts=%d, cancelled=%s",
                    self.job_id,
                    self.attempts,
                    self.cancelled,
                )
                raise PollTimeoutError(job_id=self.job_id, cancelled=self.cancelled, attempts=self.attempts)

            await self._wait()

    async def _check_status(self) -> JobState:
        self.attempts += 1
        try:
            resp = await self.transport.request(
                "GET",
                status_endpoint(self.status_url, self.job_id),
                stage=STAGE,
                job_id=self.job_id,
            )
            resp.raise_for_status(stage=STAGE, job_id=self.job_id)
            job = _decode_job(resp.body, self.job_id)
        except ScrapeJobError:
            self._transition(PollState.TRANSPORT_FAILED)
            raise

        self.last_job = job
        logger.debug("Scrape job status: job_id=%s, status=%s, attempt=%d", self.job_id, job.status, self.attempts)
        return job

    async def _wait(self) -> None:
        if self.cancel_event is None:
            await asyncio.sleep(self.config.interval)
            return
        try:
            await asyncio.wait_for(self.cancel_event.wait(), timeout=self.config.interval)
        except asyncio.TimeoutError:
            pass

    def _transition(self, state: PollState) -> None:
        if state != self.state:
            logger.debug("Scrape job poll state: job_id=%s, %s -> %s", self.job_id, self.state.value, state.value)
        self.state = state


def _decode_job(body: str, job_id: str) -> JobState:
    # Only id and status are read here; full metadata arrives with the results.
    try:
        return JobState.model_validate(json.loads(body))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise DecodeError(
            f"error unmarshalling job response body: {exc}", body=body, stage=STAGE, job_id=job_id
        ) from exc
