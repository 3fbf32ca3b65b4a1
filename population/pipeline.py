"""
Collection pipeline: concurrent population fetches across countries.

Runs one fetch per country against any PopulationFetcher, bounded by a
semaphore, and flattens the Responses into a single Polars DataFrame.
A failing country is recorded in ``errors`` and does not stop the others.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

import polars as pl

from config.settings import WB_CONCURRENCY
from population.fetchers.base import (
    DateLike,
    PopulationFetcher,
    Response,
)

logger = logging.getLogger(__name__)

HISTORY_SCHEMA = {
    "country": pl.Utf8,
    "provider": pl.Utf8,
    "date": pl.Datetime("us", "UTC"),
    "year": pl.Int32,
    "value": pl.Int64,
}

ERROR_SCHEMA = {
    "country": pl.Utf8,
    "provider": pl.Utf8,
    "error": pl.Utf8,
    "timestamp": pl.Utf8,
}


def history_frame(response: Response, country: str) -> pl.DataFrame:
    """One row per Instant, in the order the provider returned them."""
    return pl.DataFrame(
        {
            "country": [country] * len(response.history),
            "provider": [response.provider.value] * len(response.history),
            "date": [i.date for i in response.history],
            "year": [i.date.year for i in response.history],
            "value": [i.value for i in response.history],
        },
        schema=HISTORY_SCHEMA,
    )


class PopulationPipeline:
    """
    Concurrent multi-country collection for a single provider.

    Usage:
        pipeline = PopulationPipeline(WorldBankFetcher(), start, end)
        history_df = await pipeline.run(["it", "fr", "de"])
        errors_df = pipeline.errors
    """

    def __init__(
        self,
        fetcher: PopulationFetcher,
        start: DateLike,
        end: DateLike,
        concurrency: int = WB_CONCURRENCY,
    ):
        self._fetcher = fetcher
        self._start = start
        self._end = end
        self._concurrency = max(concurrency, 1)

        self._frames: dict[str, pl.DataFrame] = {}
        self._errors: list[dict] = []
        self._lock: Optional[asyncio.Lock] = None

    @property
    def errors(self) -> pl.DataFrame:
        """Failures from the last run, one row per country."""
        return pl.DataFrame(self._errors, schema=ERROR_SCHEMA)

    async def run(self, countries: Iterable[str]) -> pl.DataFrame:
        """
        Fetch every country and return the combined history.

        Rows are grouped by country in input order; within a country they
        keep the provider's order. Duplicate country codes are fetched once.
        """
        countries = list(dict.fromkeys(countries))
        self._frames = {}
        self._errors = []

        # Created here to bind to the running event loop
        sem = asyncio.Semaphore(self._concurrency)
        self._lock = asyncio.Lock()

        logger.info(
            "Population fetch: %d countries, %d:%d via %s (concurrency=%d)",
            len(countries), self._start.year, self._end.year,
            self._fetcher.provider.value, self._concurrency,
        )

        await asyncio.gather(
            *(self._fetch_with_semaphore(sem, country) for country in countries)
        )

        frames = [self._frames[c] for c in countries if c in self._frames]
        if self._errors:
            logger.warning("%d of %d countries failed", len(self._errors), len(countries))
        if not frames:
            return pl.DataFrame(schema=HISTORY_SCHEMA)
        return pl.concat(frames)

    async def _fetch_with_semaphore(self, sem: asyncio.Semaphore, country: str) -> None:
        async with sem:
            try:
                response = await self._fetcher.fetch(country, self._start, self._end)
                frame = history_frame(response, country)
                async with self._lock:
                    self._frames[country] = frame
            except Exception as exc:
                async with self._lock:
                    self._errors.append({
                        "country": country,
                        "provider": self._fetcher.provider.value,
                        "error": str(exc) or type(exc).__name__,
                        "timestamp": datetime.now(timezone.utc).isoformat(),
                    })
                logger.error("FAIL: %s: %s", country, exc)
