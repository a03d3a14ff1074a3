"""Single-delivery handle for a job running in the background.

The handle wraps the one ``asyncio.Task`` that polls, fetches and decodes a
job. A task finishes exactly once, with either a value or an exception, so a
consumer can never observe both or observe a second outcome. Awaiting the
handle again returns the same outcome.
"""
import asyncio
import logging
import weakref
from typing import Generator, Optional

from scrape_jobs.schemas.results import DecodedResponse
from scrape_jobs.services.status_poller import JobPoller, PollState

logger = logging.getLogger(__name__)


def _consume_outcome(task: "asyncio.Task[DecodedResponse]") -> None:
    # Mark the exception as retrieved so an abandoned handle does not log a traceback at shutdown.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Scrape job task finished with %s: %s", type(exc).__name__, exc)


class ScrapeResultHandle:
    """Awaitable handle yielding the ``DecodedResponse`` of one job, or its error.

    ``cancel()`` sets the cancellation signal shared with the poller, which
    then stops at its next deadline check with ``PollTimeoutError``. The same
    happens when the handle is garbage collected while the job is pending.
    """

    def __init__(self, poller: JobPoller, task: "asyncio.Task[DecodedResponse]", cancel_event: asyncio.Event):
        self._poller = poller
        self._task = task
        self._cancel_event = cancel_event
        task.add_done_callback(_consume_outcome)
        self._finalizer = weakref.finalize(self, cancel_event.set)

    @property
    def job_id(self) -> str:
        return self._poller.job_id

    @property
    def state(self) -> PollState:
        return self._poller.state

    @property
    def attempts(self) -> int:
        return self._poller.attempts

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        if not self._task.done():
            logger.info("Scrape job cancellation requested: job_id=%s", self.job_id)
        self._cancel_event.set()

    async def result(self) -> DecodedResponse:
        # Shielded: cancelling one awaiting consumer does not kill the job task.
        return await asyncio.shield(self._task)

    def exception(self) -> Optional[BaseException]:
        """Error of a finished job, ``None`` on success. Raises ``InvalidStateError`` while pending."""
        return self._task.exception()

    def __await__(self) -> Generator[None, None, DecodedResponse]:
        return self.result().__await__()

    def __repr__(self) -> str:
        return f"<ScrapeResultHandle job_id={self.job_id!r} state={self.state.value}>"
