import logging

from scrape_jobs.schemas.results import DecodedResponse, ResultShape
from scrape_jobs.services.decoder import decode_with_shape
from scrape_jobs.services.transport import ApiTransport

logger = logging.getLogger(__name__)

STAGE = "fetch"


def results_endpoint(results_url: str, job_id: str) -> str:
    return f"{results_url.rstrip('/')}/{job_id}/results"


async def fetch_results(
    transport: ApiTransport,
    results_url: str,
    job_id: str,
    shape: ResultShape,
) -> DecodedResponse:
    """GET the results of a finished job and decode them into ``shape``."""
    resp = await transport.request("GET", results_endpoint(results_url, job_id), stage=STAGE, job_id=job_id)
    resp.raise_for_status(stage=STAGE, job_id=job_id, exact_ok=True)

    decoded = decode_with_shape(
        resp.body,
        shape,
        status_code=resp.status_code,
        status=resp.status_line,
        job_id=job_id,
    )
    logger.info(
        "Scrape job results decoded: job_id=%s, shape=%s, results=%d",
        job_id,
        shape.value,
        len(decoded.results),
    )
    return decoded
