# src/parcel_tracker/rules/event_types.py
from __future__ import annotations

from typing import Iterable, Mapping

from parcel_tracker.models import ParcelEventType as T

# -------- FedEx scan event / status codes --------
# Scan events carry eventType (and derivedStatusCode); latestStatusDetail carries code.
FEDEX_EVENT_TYPES: Mapping[str, T] = {
    "OC": T.ORDER_CONFIRMED,   # shipment information sent
    "LP": T.ORDER_CONFIRMED,   # label printed
    "PU": T.PICKED_UP,
    "AO": T.EXPECTED_ON_TIME,
    "DP": T.DEPARTED,
    "PF": T.DEPARTED,          # plane in flight
    "AR": T.ARRIVED,
    "AF": T.ARRIVED,           # at FedEx facility
    "PL": T.ARRIVED,           # plane landed
    "IT": T.PROCESSING,
    "IN": T.PROCESSING,
    "CC": T.PROCESSING,        # cleared customs
    "AA": T.PROCESSING,        # at airport
    "OD": T.OUT_FOR_DELIVERY,
    "DL": T.DELIVERED,
    "DY": T.DELAYED,
    "DD": T.DELAYED,
    "CD": T.DELAYED,           # clearance delay
    "SE": T.DELAYED,           # shipment exception
    "HL": T.AWAITING_CUSTOMER_PICKUP,
    "HP": T.AWAITING_CUSTOMER_PICKUP,
    "HA": T.HELD,
    "DE": T.UNDELIVERABLE,     # delivery exception
    "CA": T.UNDELIVERABLE,     # cancelled
    "RS": T.RETURNED_TO_SENDER,
    "RP": T.RETURNED_TO_SENDER,
    "RG": T.TRANSFERRED_TO_LOCAL,  # delivered to USPS / regional partner
}

FEDEX_DELIVERED_CODES: frozenset[str] = frozenset({"DL"})

# -------- UPS activity status codes --------
# status.code (two-letter activity code)
UPS_EVENT_TYPES: Mapping[str, T] = {
    "MP": T.ORDER_CONFIRMED,
    "XD": T.PICKED_UP,
    "OR": T.ARRIVED,
    "AR": T.ARRIVED,
    "YP": T.PROCESSING,
    "DP": T.DEPARTED,
    "OF": T.ON_VEHICLE,
    "OT": T.OUT_FOR_DELIVERY,
    "FS": T.DELIVERED,
}

# status.statusCode (activity package detail status code), consulted when
# status.code is unmapped. See the UPS Tracking API appendix.
UPS_STATUS_CODE_TYPES: Mapping[str, T] = {
    **{c: T.DELAYED for c in ("00", "09", "12", "2D", "2J", "32", "41", "42", "44")},
    **{c: T.AWAITING_CUSTOMER_PICKUP for c in ("1N", "1Z", "2C", "2Q")},
    "28": T.HELD,
    "2K": T.OUT_FOR_DELIVERY,
    **{c: T.DELIVERED for c in ("2W", "3F", "3G", "3H")},
    "38": T.AWAITING_CUSTOMER_ACTION,
    "4X": T.TRANSFERRED_TO_LOCAL,
}

# status.type: single-letter activity class, last resort.
UPS_STATUS_TYPE_TYPES: Mapping[str, T] = {
    "M": T.ORDER_CONFIRMED,
    "P": T.PICKED_UP,
    "I": T.PROCESSING,
    "D": T.DELIVERED,
    "X": T.DELAYED,
}

UPS_DELIVERED_CODES: frozenset[str] = frozenset({"FS", "2W", "3F", "3G", "3H"})
UPS_DELIVERED_TYPES: frozenset[str] = frozenset({"D"})

# -------- USPS tracking event codes --------
USPS_EVENT_TYPES: Mapping[str, T] = {
    "MA": T.ORDER_CONFIRMED,   # pre-shipment info sent
    "GX": T.ORDER_CONFIRMED,   # shipping label created
    "03": T.PICKED_UP,         # acceptance / pickup
    "OA": T.PICKED_UP,
    "80": T.TRANSFERRED_TO_LOCAL,  # picked up by shipping partner
    "81": T.ARRIVED,
    "82": T.DEPARTED,
    "07": T.ARRIVED,           # arrival at unit
    "U1": T.ARRIVED,
    "A1": T.ARRIVED,
    "10": T.PROCESSING,
    "PC": T.PROCESSING,
    "T1": T.PROCESSING,        # in transit to next facility
    "L1": T.DEPARTED,
    "SF": T.DEPARTED,
    "EF": T.DEPARTED,
    "OF": T.OUT_FOR_DELIVERY,
    "01": T.DELIVERED,
    "17": T.DELIVERED,         # picked up by agent
    "43": T.DELIVERED,         # picked up at post office
    "02": T.AWAITING_CUSTOMER_ACTION,  # notice left
    "52": T.AWAITING_CUSTOMER_ACTION,
    "53": T.AWAITING_CUSTOMER_ACTION,
    "54": T.AWAITING_CUSTOMER_ACTION,
    "55": T.AWAITING_CUSTOMER_ACTION,
    "56": T.AWAITING_CUSTOMER_ACTION,
    "57": T.AWAITING_CUSTOMER_ACTION,
    "14": T.AWAITING_CUSTOMER_PICKUP,
    "16": T.AWAITING_CUSTOMER_PICKUP,  # available for pickup
    "15": T.DELAYED,           # mis-shipped
    "08": T.DELAYED,           # missent
    "44": T.HELD,              # customer recall
    "51": T.HELD,              # business closed
    "04": T.UNDELIVERABLE,     # refused
    "05": T.UNDELIVERABLE,
    "21": T.UNDELIVERABLE,
    "22": T.UNDELIVERABLE,
    "23": T.UNDELIVERABLE,
    "24": T.UNDELIVERABLE,
    "25": T.UNDELIVERABLE,
    "26": T.UNDELIVERABLE,
    "28": T.UNDELIVERABLE,
    "09": T.RETURNED_TO_SENDER,
    "27": T.RETURNED_TO_SENDER,
    "29": T.RETURNED_TO_SENDER,
    "31": T.RETURNED_TO_SENDER,
    # named codes seen on some responses
    "DELIVERY": T.DELIVERED,
    "ARRIVAL": T.ARRIVED,
    "DEPARTURE": T.DEPARTED,
    "OUT_FOR_DELIVERY": T.OUT_FOR_DELIVERY,
}

USPS_DELIVERED_CODES: frozenset[str] = frozenset({"01", "17", "43", "DELIVERY"})


def lookup(table: Mapping[str, T], code: object, default: T = T.UNKNOWN) -> T:
    """Case-insensitive lookup; unmapped or blank codes resolve to `default`."""
    key = str(code or "").strip().upper()
    if not key:
        return default
    return table.get(key, default)


def first_mapped(*candidates: tuple[Mapping[str, T], object]) -> T:
    """Try (table, code) pairs in order and return the first non-UNKNOWN type."""
    for table, code in candidates:
        t = lookup(table, code)
        if t is not T.UNKNOWN:
            return t
    return T.UNKNOWN


def any_delivered(codes: Iterable[object], delivered_codes: frozenset[str]) -> bool:
    """True iff at least one native code is in the carrier's delivered set."""
    return any(str(c or "").strip().upper() in delivered_codes for c in codes)
