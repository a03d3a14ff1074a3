"""Errors raised by the scrape job lifecycle.

Every stage fails fast with one of these. The async handle surfaces exactly
one of them to the caller.
"""
from typing import Optional

JOB_FAULTED_MESSAGE = "there was an error processing your query"
POLL_TIMEOUT_MESSAGE = "timeout exceeded"

# Bodies are kept verbatim on the exception; only the message is truncated.
_BODY_PREVIEW_CHARS = 500


def _preview(body: str) -> str:
    if len(body) <= _BODY_PREVIEW_CHARS:
        return body
    return body[:_BODY_PREVIEW_CHARS] + "..."


class ScrapeJobError(Exception):
    """Base class for all scrape job errors."""

    def __init__(self, message: str, *, stage: Optional[str] = None, job_id: Optional[str] = None):
        self.message = message
        self.stage = stage
        self.job_id = job_id
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.stage:
            context.append(f"stage={self.stage}")
        if self.job_id:
            context.append(f"job_id={self.job_id}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class TransportError(ScrapeJobError):
    """Raised when the API could not be reached or the response could not be read."""


class ApiStatusError(ScrapeJobError):
    """Raised when the API answers with a non-success HTTP status."""

    def __init__(
        self,
        status_code: int,
        body: str,
        *,
        stage: Optional[str] = None,
        job_id: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"error with status code {status_code}: {_preview(body)}",
            stage=stage,
            job_id=job_id,
        )


class DecodeError(ScrapeJobError):
    """Raised when a response body is malformed or does not match the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        body: str = "",
        index: Optional[int] = None,
        stage: Optional[str] = None,
        job_id: Optional[str] = None,
    ):
        self.body = body
        self.index = index
        if index is not None:
            message = f"{message} at results[{index}]"
        super().__init__(message, stage=stage, job_id=job_id)


class JobFaultedError(ScrapeJobError):
    """Raised when the provider reports the job as faulted."""

    def __init__(self, *, job_id: Optional[str] = None):
        super().__init__(JOB_FAULTED_MESSAGE, stage="poll", job_id=job_id)


class PollTimeoutError(ScrapeJobError):
    """Raised when the deadline passes or polling is cancelled before the job finishes."""

    def __init__(self, *, job_id: Optional[str] = None, cancelled: bool = False, attempts: int = 0):
        self.cancelled = cancelled
        self.attempts = attempts
        super().__init__(POLL_TIMEOUT_MESSAGE, stage="poll", job_id=job_id)
