# src/parcel_tracker/schemas/common.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

DOMESTIC_COUNTRY = "US"

# ISO-8601-ish timestamps seen across carriers, most specific first.
ISO_TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
)
ISO_DATE_FORMATS: tuple[str, ...] = ("%Y-%m-%d",)

# UPS sends compact date and time fields.
COMPACT_TIMESTAMP_FORMATS: tuple[str, ...] = ("%Y%m%d%H%M%S", "%Y%m%d%H%M")
COMPACT_DATE_FORMATS: tuple[str, ...] = ("%Y%m%d",)


def parse_timestamp(
    value: object,
    timestamp_formats: Sequence[str] = ISO_TIMESTAMP_FORMATS,
    date_formats: Sequence[str] = ISO_DATE_FORMATS,
) -> datetime:
    """Parse a carrier timestamp: full-timestamp formats first, then date-only.

    Raises ValueError only when no format matches.
    """
    text = str(value or "").strip()
    if not text:
        raise ValueError("empty timestamp")
    for fmt in (*timestamp_formats, *date_formats):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognized timestamp: {text!r}")


def parse_optional_timestamp(
    value: object,
    timestamp_formats: Sequence[str] = ISO_TIMESTAMP_FORMATS,
    date_formats: Sequence[str] = ISO_DATE_FORMATS,
) -> Optional[datetime]:
    """Like parse_timestamp, but blank input yields None (malformed input still raises)."""
    if value is None or str(value).strip() == "":
        return None
    return parse_timestamp(value, timestamp_formats, date_formats)


def bool_string(value: object) -> bool:
    """Accept JSON booleans or their string forms ("true", "Y")."""
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"true", "y", "yes", "1"}


def as_dict(value: object) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def as_list(value: object) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def text(value: object) -> str:
    return "" if value is None else str(value).strip()


def format_location(
    city: object = None,
    state: object = None,
    postal_code: object = None,
    country: object = None,
    *,
    domestic: str = DOMESTIC_COUNTRY,
) -> str:
    """Render "CITY, STATE ZIP, COUNTRY", keeping only the segments present.

    The country is dropped when it equals the domestic default. Empty input
    gives the empty string.
    """
    city_s, state_s, zip_s, country_s = (text(v) for v in (city, state, postal_code, country))

    out = city_s
    if state_s:
        out = f"{out}, {state_s}" if out else state_s
    if zip_s:
        out = f"{out} {zip_s}" if out else zip_s
    if country_s and country_s.upper() != domestic.upper():
        out = f"{out}, {country_s}" if out else country_s
    return out.upper()


@dataclass(frozen=True)
class Measure:
    units: str = ""
    value: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "Measure":
        m = as_dict(d)
        return cls(units=text(m.get("units") or m.get("unitOfMeasurement")), value=text(m.get("value")))


@dataclass(frozen=True)
class Money:
    currency: str = ""
    value: float = 0.0

    @classmethod
    def from_dict(cls, d: object) -> "Money":
        m = as_dict(d)
        try:
            value = float(m.get("value") or 0)
        except (TypeError, ValueError):
            value = 0.0
        return cls(currency=text(m.get("currency")), value=value)
