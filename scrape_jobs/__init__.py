"""Async client for a scraping-as-a-service queries API.

Submits scrape jobs, polls them under a deadline and decodes their results
into raw, parsed or custom-parsed entries.
"""

from scrape_jobs.core.errors import (
    ApiStatusError,
    DecodeError,
    JobFaultedError,
    PollTimeoutError,
    ScrapeJobError,
    TransportError,
)
from scrape_jobs.schemas.job import Job, JobState, JobStatus
from scrape_jobs.schemas.results import (
    CustomParsedResult,
    DecodedResponse,
    ParsedContent,
    ParsedResult,
    RawResult,
    ResultShape,
)
from scrape_jobs.services.async_client import AsyncScrapeClient
from scrape_jobs.services.decoder import decode_response
from scrape_jobs.services.result_handle import ScrapeResultHandle
from scrape_jobs.services.status_poller import PollConfig, PollState
from scrape_jobs.services.transport import SDK_VERSION as __version__

__all__ = [
    # Client
    "AsyncScrapeClient",
    "ScrapeResultHandle",
    "PollConfig",
    "PollState",
    "decode_response",
    # Models
    "Job",
    "JobState",
    "JobStatus",
    "ResultShape",
    "RawResult",
    "ParsedResult",
    "ParsedContent",
    "CustomParsedResult",
    "DecodedResponse",
    # Errors
    "ScrapeJobError",
    "TransportError",
    "ApiStatusError",
    "DecodeError",
    "JobFaultedError",
    "PollTimeoutError",
]
