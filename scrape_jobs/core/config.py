import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_QUERIES_URL = "https://data.oxylabs.io/v1/queries"
DEFAULT_POLL_INTERVAL_SECONDS = 2.0
DEFAULT_POLL_TIMEOUT_SECONDS = 50.0


class Settings(BaseSettings):
    api_username: str = Field("", alias="SCRAPER_API_USERNAME")
    api_password: str = Field("", alias="SCRAPER_API_PASSWORD")
    base_url: str = Field(DEFAULT_QUERIES_URL, alias="SCRAPER_API_BASE_URL")
    # Status and results endpoints default to the job-creation URL.
    status_url: str | None = Field(None, alias="SCRAPER_API_STATUS_URL")
    results_url: str | None = Field(None, alias="SCRAPER_API_RESULTS_URL")
    poll_interval_seconds: float = Field(DEFAULT_POLL_INTERVAL_SECONDS, alias="SCRAPER_POLL_INTERVAL_SECONDS")
    poll_timeout_seconds: float = Field(DEFAULT_POLL_TIMEOUT_SECONDS, alias="SCRAPER_POLL_TIMEOUT_SECONDS")
    request_timeout_seconds: float = Field(30.0, alias="SCRAPER_REQUEST_TIMEOUT_SECONDS")
    connect_timeout_seconds: float = Field(10.0, alias="SCRAPER_CONNECT_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    def resolved_status_url(self) -> str:
        return self.status_url or self.base_url

    def resolved_results_url(self) -> str:
        return self.results_url or self.base_url


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
