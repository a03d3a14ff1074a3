"""Pydantic models for scrape job metadata."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import ConfigDict, Field

from scrape_jobs.schemas.base import ZeroValueModel


class JobStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAULTED = "faulted"


TERMINAL_STATUSES = {JobStatus.DONE.value, JobStatus.FAULTED.value}


class JobState(ZeroValueModel):
    """The ``id`` and ``status`` of a job, all the status endpoint is read for.

    The client never changes a job's status itself.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = ""
    status: str = ""

    @property
    def is_done(self) -> bool:
        return self.status == JobStatus.DONE.value

    @property
    def is_faulted(self) -> bool:
        return self.status == JobStatus.FAULTED.value

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class JobContextItem(ZeroValueModel):
    model_config = ConfigDict(extra="ignore")

    key: str = ""
    value: Any = None


class JobLink(ZeroValueModel):
    model_config = ConfigDict(extra="ignore")

    rel: str = ""
    href: str = ""
    method: str = ""


class Job(JobState):
    """A remote scrape job with the metadata echoed back alongside its results."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    callback_url: Optional[str] = None
    client_id: Optional[int] = None
    context: List[JobContextItem] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    domain: Optional[str] = None
    geo_location: Any = None
    limit: Optional[int] = None
    locale: Any = None
    pages: Optional[int] = None
    parse: Optional[bool] = None
    parser_type: Any = None
    parsing_instructions: Any = None
    browser_instructions: Any = None
    render: Any = None
    url: Any = None
    query: Optional[str] = None
    source: Optional[str] = None
    start_page: Optional[int] = None
    storage_type: Any = None
    storage_url: Any = None
    subdomain: Optional[str] = None
    content_encoding: Optional[str] = None
    user_agent_type: Optional[str] = None
    session_info: Any = None
    statuses: List[Any] = Field(default_factory=list)
    client_notes: Any = None
    links: List[JobLink] = Field(default_factory=list, alias="_links")
