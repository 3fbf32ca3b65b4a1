"""
World Bank v2 XML payload: record types and decoder.

A successful response looks like:

    <wb:data xmlns:wb="http://www.worldbank.org" page="1" pages="1"
             per_page="50" total="3" lastupdated="2024-06-28">
      <wb:data>
        <wb:indicator id="SP.POP.TOTL">Population, total</wb:indicator>
        <wb:country id="IT">Italy</wb:country>
        <wb:countryiso3code>ITA</wb:countryiso3code>
        <wb:date>2012</wb:date>
        <wb:value>59539717</wb:value>
        <wb:unit />
        <wb:obs_status />
        <wb:decimal>0</wb:decimal>
      </wb:data>
      ...
    </wb:data>

Unknown country codes and similar request problems come back as a
``<wb:error>`` document instead.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR
from typing import Optional
from xml.etree import ElementTree

from config.settings import WB_XML_NAMESPACE
from population.fetchers.base import DecodeError

_NS = {"wb": WB_XML_NAMESPACE}
_INTEGER = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class Indicator:
    id: str = ""
    name: str = ""


@dataclass(frozen=True)
class Country:
    id: str = ""
    name: str = ""


@dataclass(frozen=True)
class WorldBankRecord:
    """One ``<wb:data>`` entry: a single year of one indicator."""
    indicator: Indicator
    country: Country
    country_iso3: str
    year: int
    value: int           # empty <wb:value/> decodes to 0
    unit: str = ""
    obs_status: str = ""
    decimal: str = ""


@dataclass(frozen=True)
class WorldBankEnvelope:
    """The outer ``<wb:data>`` element with its paging attributes."""
    page: str = ""
    pages: str = ""
    per_page: str = ""
    total: str = ""
    lastupdated: str = ""
    records: tuple[WorldBankRecord, ...] = ()


def _tag(name: str) -> str:
    return f"{{{WB_XML_NAMESPACE}}}{name}"


def _child(element: ElementTree.Element, name: str) -> Optional[ElementTree.Element]:
    return element.find(f"wb:{name}", _NS)


def _text(element: ElementTree.Element, name: str) -> str:
    child = _child(element, name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _integer(raw: str, field: str, position: int) -> int:
    if not _INTEGER.fullmatch(raw):
        raise DecodeError(
            f"record {position}: {field} {raw!r} is not an integer"
        )
    return int(raw)


def _decode_record(position: int, element: ElementTree.Element) -> WorldBankRecord:
    indicator = _child(element, "indicator")
    country = _child(element, "country")

    year_raw = _text(element, "date")
    if not year_raw:
        raise DecodeError(f"record {position}: missing year")
    year = _integer(year_raw, "year", position)
    if not MINYEAR <= year <= MAXYEAR:
        raise DecodeError(f"record {position}: year {year} is out of range")
    value_raw = _text(element, "value")

    return WorldBankRecord(
        indicator=Indicator(
            id=indicator.get("id", "") if indicator is not None else "",
            name=_text(element, "indicator"),
        ),
        country=Country(
            id=country.get("id", "") if country is not None else "",
            name=_text(element, "country"),
        ),
        country_iso3=_text(element, "countryiso3code"),
        year=year,
        value=_integer(value_raw, "value", position) if value_raw else 0,
        unit=_text(element, "unit"),
        obs_status=_text(element, "obs_status"),
        decimal=_text(element, "decimal"),
    )


def decode_envelope(body: bytes) -> WorldBankEnvelope:
    """
    Parse a World Bank XML response body.

    Raises DecodeError on malformed XML, on a ``<wb:error>`` reply, on any
    root other than the ``<wb:data>`` envelope, and on any record whose
    year or value is not an integer. One bad record fails the whole body.
    Absent fields decode to "" or 0, except the year: a record without one
    raises DecodeError, since no date can be derived from year 0.
    """
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as exc:
        raise DecodeError(f"World Bank payload is not well-formed XML: {exc}") from exc

    if root.tag == _tag("error"):
        message = _text(root, "message") or "no message"
        raise DecodeError(f"World Bank returned an error: {message}")
    if root.tag != _tag("data"):
        raise DecodeError(
            f"unexpected root element {root.tag!r}, expected the wb:data envelope"
        )

    records = tuple(
        _decode_record(position, element)
        for position, element in enumerate(root.findall("wb:data", _NS), start=1)
    )

    return WorldBankEnvelope(
        page=root.get("page", ""),
        pages=root.get("pages", ""),
        per_page=root.get("per_page", ""),
        total=root.get("total", ""),
        lastupdated=root.get("lastupdated", ""),
        records=records,
    )
