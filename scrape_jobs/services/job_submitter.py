import json
import logging
from typing import Union

from scrape_jobs.core.errors import DecodeError
from scrape_jobs.services.transport import ApiTransport

logger = logging.getLogger(__name__)

STAGE = "submit"


async def submit_job(transport: ApiTransport, base_url: str, payload: Union[bytes, str]) -> str:
    """POST a serialized scrape payload and return the job id the provider assigned.

    A single attempt is made; the caller decides whether to resubmit.
    """
    resp = await transport.request("POST", base_url, content=payload, stage=STAGE)
    resp.raise_for_status(stage=STAGE)

    try:
        data = json.loads(resp.body)
    except json.JSONDecodeError as exc:
        raise DecodeError(
            f"error unmarshalling job response body: {exc}", body=resp.body, stage=STAGE
        ) from exc

    job_id = data.get("id") if isinstance(data, dict) else None
    if not isinstance(job_id, str) or not job_id:
        raise DecodeError("job response body has no job id", body=resp.body, stage=STAGE)

    logger.info("Scrape job submitted: job_id=%s, status=%s", job_id, data.get("status"))
    return job_id
