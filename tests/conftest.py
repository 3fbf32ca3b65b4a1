from __future__ import annotations
import pytest

_RECORD = """
  <wb:data>
    <wb:indicator id="SP.POP.TOTL">Population, total</wb:indicator>
    <wb:country id="IT">Italy</wb:country>
    <wb:countryiso3code>ITA</wb:countryiso3code>
    <wb:date>{year}</wb:date>
    <wb:value>{value}</wb:value>
    <wb:unit />
    <wb:obs_status>{obs_status}</wb:obs_status>
    <wb:decimal>0</wb:decimal>
  </wb:data>"""

_ENVELOPE = """<?xml version="1.0" encoding="utf-8"?>
<wb:data page="1" pages="{pages}" per_page="50" total="{total}" sourceid="2" lastupdated="2024-06-28" xmlns:wb="http://www.worldbank.org">{records}
</wb:data>"""


def build_payload(rows, pages: int = 1) -> bytes:
    """rows: iterable of (year, value) or (year, value, obs_status)."""
    rows = list(rows)
    records = "".join(
        _RECORD.format(
            year=row[0],
            value=row[1],
            obs_status=row[2] if len(row) > 2 else "",
        )
        for row in rows
    )
    return _ENVELOPE.format(pages=pages, total=len(rows), records=records).encode("utf-8")


@pytest.fixture
def wb_payload():
    """Factory for World Bank XML bodies."""
    return build_payload


@pytest.fixture
def italy_payload() -> bytes:
    return build_payload([
        (2010, 59190143),
        (2011, 59364690),
        (2012, 59539717),
    ])
