"""
Population History: Configuration

Endpoint, indicator and concurrency settings for the World Bank
population fetcher.
"""
from __future__ import annotations
import os

# ─── World Bank API ──────────────────────────────────────────────────────────

# Override for staging mirrors / local fixtures
WB_BASE_URL = os.environ.get("WB_BASE_URL", "https://api.worldbank.org/v2")

# Population, total
WB_POPULATION_INDICATOR = "SP.POP.TOTL"

# Namespace used by every element of the v2 XML payload
WB_XML_NAMESPACE = "http://www.worldbank.org"

WB_TIMEOUT = float(os.environ.get("WB_TIMEOUT", "15.0"))

# World Bank tolerates ~3 concurrent connections
WB_CONCURRENCY = int(os.environ.get("WB_CONCURRENCY", "3"))


# ─── Defaults for the entry-point script ─────────────────────────────────────

DEFAULT_START_YEAR = 1960
DEFAULT_END_YEAR = 2023
