# src/parcel_tracker/rules/classifier.py
from __future__ import annotations

import re
from typing import Iterable, Optional

from parcel_tracker.models import Carrier

# Separators customers paste in along with the number.
_SEPARATORS = re.compile(r"[\s\-]+")

# -------- Content rules (literal prefixes), checked in order --------
# The first matching rule wins; no scoring.
_PREFIX_RULES: tuple[tuple[re.Pattern[str], Carrier], ...] = tuple(
    (re.compile(p, re.ASCII), c)
    for p, c in (
        # UPS: 1Z + 6 shipper chars + 2 service digits + 8 package digits
        (r"^1Z[A-Z0-9]{16}$", Carrier.UPS),
        # DHL Express/Parcel "JJD" forms and DHL eCommerce "GM"
        (r"^JJD\d{18}$", Carrier.DHL),
        (r"^JJD0?1?\d{10,11}$", Carrier.DHL),
        (r"^GM\d{16,18}$", Carrier.DHL),
        # UPU S10 international items, handed to USPS inside the US
        (r"^[A-Z]{2}\d{9}US$", Carrier.USPS),
        (r"^[A-Z]{2}\d{9}[A-Z]{2}$", Carrier.USPS),
        (r"^TBA\d{12}$", Carrier.AMAZON),
        (r"^[CD]\d{14}$", Carrier.ONTRAC),
        (r"^L[A-Z]\d{8}$", Carrier.LASERSHIP),
        (r"^1LS\d{12}$", Carrier.LASERSHIP),
        # UPS Mail Innovations, Freight and Express alternates
        (r"^(MI|YW|UP)\d{15,22}$", Carrier.UPS),
        (r"^T\d{10}$", Carrier.UPS),
        (r"^H\d{9,10}$", Carrier.UPS),
        # FedEx door tag
        (r"^DT\d{12}$", Carrier.FEDEX),
        # FedEx Ground 96 + 20 digits (beats the 22-digit USPS length rule)
        (r"^96\d{20}$", Carrier.FEDEX),
        # USPS IMpb with ZIP / ZIP+4 routing prefix
        (r"^420\d{5}\d{22}$", Carrier.USPS),
        (r"^420\d{9}\d{22}$", Carrier.USPS),
    )
)

# -------- Length rules for all-numeric numbers --------
_NUMERIC_BY_LENGTH: dict[int, Carrier] = {
    9: Carrier.UPS,
    10: Carrier.DHL,
    11: Carrier.DHL,
    12: Carrier.FEDEX,
    13: Carrier.USPS,
    14: Carrier.FEDEX,
    15: Carrier.FEDEX,
    18: Carrier.UPS,
    22: Carrier.USPS,
}

# 20-digit numbers are shared by USPS IMpb and FedEx SmartPost / Ground.
USPS_20_DIGIT_PREFIXES: frozenset[str] = frozenset({"92", "93", "94", "95"})


def normalize_tracking_number(raw: object) -> str:
    """Strip spaces/hyphens and upper-case. `None` becomes the empty string."""
    if raw is None:
        return ""
    return _SEPARATORS.sub("", str(raw)).upper()


def _classify_numeric(tn: str) -> Carrier:
    if len(tn) == 20:
        return Carrier.USPS if tn[:2] in USPS_20_DIGIT_PREFIXES else Carrier.FEDEX
    return _NUMERIC_BY_LENGTH.get(len(tn), Carrier.UNKNOWN)


def classify(raw: object) -> Carrier:
    """Map a raw tracking number to a carrier. Total: never raises.

    Precedence:
      1) empty -> Unknown
      2) literal-prefix rules, in table order
      3) all-numeric length table (20 digits split on USPS prefixes)
      4) Unknown
    """
    tn = normalize_tracking_number(raw)
    if not tn:
        return Carrier.UNKNOWN

    for pattern, carrier in _PREFIX_RULES:
        if pattern.match(tn):
            return carrier

    if tn.isascii() and tn.isdigit():
        return _classify_numeric(tn)

    return Carrier.UNKNOWN


def group_by_carrier(
    tracking_numbers: Iterable[object],
    overrides: Optional[dict[str, Carrier]] = None,
) -> dict[Carrier, list[str]]:
    """Group normalized, de-duplicated numbers by carrier, preserving first-seen order.

    `overrides` maps a normalized tracking number to a carrier chosen by the caller
    (e.g. a carrier-qualified CLI flag); those numbers skip classification.
    """
    overrides = overrides or {}
    groups: dict[Carrier, list[str]] = {}
    seen: set[str] = set()
    for raw in tracking_numbers:
        tn = normalize_tracking_number(raw)
        if not tn or tn in seen:
            continue
        seen.add(tn)
        carrier = overrides.get(tn) or classify(tn)
        groups.setdefault(carrier, []).append(tn)
    return groups
