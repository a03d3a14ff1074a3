#!/usr/bin/env python
"""
Submit one scrape payload and wait for its results.

Credentials and endpoints come from SCRAPER_* environment variables or .env.

Run manually:
    python scripts/run_scrape_job.py payload.json
"""
import argparse
import asyncio
import json
import logging
from pathlib import Path

from scrape_jobs.core.config import get_settings
from scrape_jobs.core.errors import ScrapeJobError
from scrape_jobs.services.async_client import AsyncScrapeClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("scrape_job")


async def run(payload_path: Path, timeout: float | None) -> int:
    payload = json.loads(payload_path.read_text())
    async with AsyncScrapeClient.from_settings(get_settings()) as client:
        try:
            decoded = await client.scrape_and_wait(payload, timeout=timeout)
        except ScrapeJobError:
            logger.exception("Scrape job failed")
            return 1

    logger.info("Job %s finished with %d results (%s)", decoded.job.id, len(decoded.results), decoded.shape.value)
    for entry in decoded.results:
        print(json.dumps(entry.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("payload", type=Path, help="JSON file with the scrape payload")
    parser.add_argument("--timeout", type=float, default=None, help="Polling timeout in seconds")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(run(args.payload, args.timeout)))


if __name__ == "__main__":
    main()
