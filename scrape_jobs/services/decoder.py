"""Decoding of job results payloads.

The top level is read as a plain mapping first so that ``results`` and
``job`` can be decoded independently and unknown keys are ignored. Every
entry of ``results`` goes through the one model selected for the whole call;
there is no fallback between shapes.
"""
import json
import logging
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from scrape_jobs.core.errors import DecodeError
from scrape_jobs.schemas.job import Job
from scrape_jobs.schemas.results import RESULT_MODELS, DecodedResponse, ResultEntry, ResultShape

logger = logging.getLogger(__name__)

STAGE = "decode"


def decode_response(
    raw_body: Union[bytes, str],
    parse: bool,
    custom_parse_instructions: bool,
    *,
    status_code: int = 0,
    status: str = "",
    job_id: Optional[str] = None,
) -> DecodedResponse:
    shape = ResultShape.from_flags(parse, custom_parse_instructions)
    return decode_with_shape(raw_body, shape, status_code=status_code, status=status, job_id=job_id)


def decode_with_shape(
    raw_body: Union[bytes, str],
    shape: ResultShape,
    *,
    status_code: int = 0,
    status: str = "",
    job_id: Optional[str] = None,
) -> DecodedResponse:
    body_text = raw_body.decode("utf-8", errors="replace") if isinstance(raw_body, bytes) else raw_body

    try:
        document = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(
            f"failed to parse JSON object: {exc}", body=body_text, stage=STAGE, job_id=job_id
        ) from exc
    if not isinstance(document, dict):
        raise DecodeError(
            f"expected a JSON object, got {type(document).__name__}", body=body_text, stage=STAGE, job_id=job_id
        )

    results = _decode_results(document.get("results"), shape, body_text, job_id)

    job = Job()
    if document.get("job") is not None:
        try:
            job = Job.model_validate(document["job"])
        except ValidationError as exc:
            raise DecodeError(
                f"failed to decode job object: {exc}", body=body_text, stage=STAGE, job_id=job_id
            ) from exc

    return DecodedResponse(shape=shape, results=tuple(results), job=job, status_code=status_code, status=status)


def _decode_results(raw_results: Any, shape: ResultShape, body_text: str, job_id: Optional[str]) -> List[ResultEntry]:
    if raw_results is None:
        return []
    if not isinstance(raw_results, list):
        raise DecodeError(
            f"results must be an array, got {type(raw_results).__name__}", body=body_text, stage=STAGE, job_id=job_id
        )

    model = RESULT_MODELS[shape]
    decoded = []
    for idx, item in enumerate(raw_results):
        try:
            decoded.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Result entry %d failed to decode as %s: job_id=%s", idx, shape.value, job_id)
            raise DecodeError(
                f"failed to decode {shape.value} result: {exc}",
                body=body_text,
                index=idx,
                stage=STAGE,
                job_id=job_id,
            ) from exc
    return decoded
