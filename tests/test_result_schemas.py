import pytest
from pydantic import ValidationError

from scrape_jobs.core.config import Settings
from scrape_jobs.core.errors import ApiStatusError, DecodeError, JobFaultedError
from scrape_jobs.schemas.job import Job, JobStatus
from scrape_jobs.schemas.results import (
    CustomParsedResult,
    DecodedResponse,
    ParsedResult,
    RawResult,
    ResultShape,
)


@pytest.mark.parametrize(
    "parse,custom,expected",
    [
        (False, False, ResultShape.RAW),
        (False, True, ResultShape.RAW),
        (True, False, ResultShape.PARSED),
        (True, True, ResultShape.CUSTOM_PARSED),
    ],
)
def test_shape_from_flags(parse, custom, expected):
    assert ResultShape.from_flags(parse, custom) == expected


def test_decoded_response_rejects_mixed_shapes():
    with pytest.raises(ValidationError):
        DecodedResponse(shape=ResultShape.RAW, results=(RawResult(content="a"), CustomParsedResult(content={})))


def test_decoded_response_is_frozen():
    decoded = DecodedResponse(shape=ResultShape.PARSED, results=(ParsedResult(),))
    with pytest.raises(ValidationError):
        decoded.status_code = 500


def test_job_status_helpers():
    assert Job(id="1", status=JobStatus.DONE.value).is_terminal
    assert Job(id="1", status="faulted").is_faulted
    assert not Job(id="1", status="pending").is_terminal
    assert not Job(id="1", status="something_new").is_terminal


def test_error_messages_carry_context():
    faulted = JobFaultedError(job_id="7x1")
    assert str(faulted) == "there was an error processing your query (stage=poll, job_id=7x1)"

    status = ApiStatusError(503, "x" * 2000, stage="fetch", job_id="7x1")
    assert len(status.body) == 2000
    assert "error with status code 503" in str(status)
    assert len(str(status)) < 700

    decode = DecodeError("bad entry", index=3)
    assert str(decode) == "bad entry at results[3]"


def test_settings_resolve_endpoint_defaults():
    settings = Settings(_env_file=None)
    assert settings.base_url == "https://data.oxylabs.io/v1/queries"
    assert settings.resolved_status_url() == settings.base_url
    assert settings.resolved_results_url() == settings.base_url
    assert settings.poll_interval_seconds == 2.0
    assert settings.poll_timeout_seconds == 50.0


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SCRAPER_API_RESULTS_URL", "https://results.test/v1/queries")
    monkeypatch.setenv("SCRAPER_POLL_INTERVAL_SECONDS", "0.5")
    settings = Settings(_env_file=None)
    assert settings.resolved_results_url() == "https://results.test/v1/queries"
    assert settings.poll_interval_seconds == 0.5
