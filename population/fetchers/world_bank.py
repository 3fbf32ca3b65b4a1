"""
World Bank Open Data API fetcher: total population.

Endpoint: https://api.worldbank.org/v2/countries/{iso2}/indicators/SP.POP.TOTL
Docs: https://datahelpdesk.worldbank.org/knowledgebase/articles/889392

No API key required. The API answers in XML unless told otherwise; this
fetcher consumes the XML payload (see population.fetchers.wire).
Annual series: each record is resolved to Dec-31 of its year, UTC.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional
from urllib.parse import quote

import httpx

from config.settings import WB_BASE_URL, WB_POPULATION_INDICATOR, WB_TIMEOUT
from population.fetchers.base import (
    DateLike,
    Instant,
    MalformedRequest,
    PopulationFetcher,
    Provider,
    Response,
)
from population.fetchers.wire import WorldBankEnvelope, decode_envelope

logger = logging.getLogger(__name__)


def normalize(envelope: WorldBankEnvelope) -> tuple[Instant, ...]:
    """
    Map decoded records to Instants, one per record, in payload order.

    Values are taken as-is: no scaling by ``decimal`` and no filtering of
    zeros. An unreported value (empty ``<wb:value/>``) has already decoded
    to 0 and is indistinguishable from a real zero here.
    """
    return tuple(
        Instant(
            date=datetime(record.year, 12, 31, tzinfo=timezone.utc),
            value=record.value,
        )
        for record in envelope.records
    )


class WorldBankFetcher(PopulationFetcher):
    """Fetches total population from the World Bank Open Data API."""

    provider = Provider.WORLD_BANK

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = WB_TIMEOUT,
        base_url: str = WB_BASE_URL,
    ):
        # An injected client is shared, never closed here
        self._client = client
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    def build_url(self, country: str, start: DateLike, end: DateLike) -> httpx.URL:
        """
        Build the indicator URL for ``country`` covering start.year..end.year.

        The country code is embedded verbatim; whether it names a real
        country is left to the API. ``per_page`` is sized to the year span
        so the whole range arrives in one page.
        """
        if not country or country.strip(".") == "" or quote(country, safe="") != country:
            raise MalformedRequest(
                f"country code {country!r} cannot be embedded in a URL path"
            )

        span = max(end.year - start.year + 1, 1)
        try:
            return httpx.URL(
                f"{self._base_url}/countries/{country}/indicators/{WB_POPULATION_INDICATOR}",
                params={"date": f"{start.year}:{end.year}", "per_page": span},
            )
        except httpx.InvalidURL as exc:
            raise MalformedRequest(f"invalid URL for country {country!r}: {exc}") from exc

    async def fetch(self, country: str, start: DateLike, end: DateLike) -> Response:
        """
        Fetch the population history of ``country`` from the World Bank.

        One GET per call. Errors from any stage propagate unchanged:
        MalformedRequest from build_url, httpx.HTTPError from the transport
        (including non-2xx statuses), DecodeError from the payload.
        """
        url = self.build_url(country, start, end)

        async with self._session() as client:
            resp = await client.get(url)
        resp.raise_for_status()

        envelope = decode_envelope(resp.content)
        history = normalize(envelope)

        if envelope.pages.isdigit() and int(envelope.pages) > 1:
            logger.warning(
                "World Bank: %s %d:%d spans %s pages, only page %s was read",
                country, start.year, end.year, envelope.pages, envelope.page,
            )

        logger.info(
            "World Bank: %s %d:%d → %d observations",
            country, start.year, end.year, len(history),
        )
        return Response(provider=self.provider, history=history)

    async def health_check(self) -> bool:
        """Ping the World Bank API with a one-year population request."""
        today = datetime.now(timezone.utc)
        try:
            async with self._session() as client:
                resp = await client.get(self.build_url("US", today, today))
                return resp.status_code == 200
        except httpx.HTTPError as exc:
            logger.error("World Bank health check failed: %s", exc)
            return False
