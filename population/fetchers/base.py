"""
Base fetcher interface for all population data providers.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Union

import httpx

DateLike = Union[date, datetime]


class Provider(str, Enum):
    """Named origin of a Response."""
    WORLD_BANK = "The World Bank"


@dataclass(frozen=True)
class Instant:
    """A single (date, value) point in a population time series."""
    date: datetime       # year-end, UTC midnight
    value: int


@dataclass(frozen=True)
class Response:
    """Provider-agnostic population history.

    ``history`` keeps the order the source returned it in, which is not
    necessarily chronological.
    """
    provider: Provider
    history: tuple[Instant, ...] = ()


class PopulationFetchError(RuntimeError):
    """Base error raised by population fetchers."""


class MalformedRequest(PopulationFetchError, ValueError):
    """Inputs cannot be turned into a valid request URL."""


class DecodeError(PopulationFetchError):
    """Response body does not match the expected payload schema."""


# Network/HTTP failures are surfaced as the client's own exceptions
TransportFailure = httpx.HTTPError


class PopulationFetcher(ABC):
    """Abstract base for all population data sources."""

    provider: Provider

    @abstractmethod
    async def fetch(self, country: str, start: DateLike, end: DateLike) -> Response:
        """
        Fetch the population history of one country.

        Covers every year from ``start.year`` to ``end.year`` inclusive.
        Raises MalformedRequest, TransportFailure or DecodeError; there is
        no partial result.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the API is reachable and responding."""
        ...
