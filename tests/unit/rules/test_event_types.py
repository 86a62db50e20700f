from parcel_tracker.models import ParcelEventType as T
from parcel_tracker.rules.event_types import (
    FEDEX_DELIVERED_CODES,
    FEDEX_EVENT_TYPES,
    UPS_EVENT_TYPES,
    UPS_STATUS_CODE_TYPES,
    USPS_DELIVERED_CODES,
    USPS_EVENT_TYPES,
    any_delivered,
    first_mapped,
    lookup,
)


def test_lookup_is_case_insensitive_and_defaults_to_unknown():
    assert lookup(FEDEX_EVENT_TYPES, "dl") is T.DELIVERED
    assert lookup(FEDEX_EVENT_TYPES, " OD ") is T.OUT_FOR_DELIVERY
    assert lookup(FEDEX_EVENT_TYPES, "ZZ") is T.UNKNOWN
    assert lookup(FEDEX_EVENT_TYPES, None) is T.UNKNOWN
    assert lookup(FEDEX_EVENT_TYPES, "") is T.UNKNOWN


def test_first_mapped_falls_through_tables():
    # UPS: activity code first, then the appendix status code
    assert first_mapped((UPS_EVENT_TYPES, "OF"), (UPS_STATUS_CODE_TYPES, "2K")) is T.ON_VEHICLE
    assert first_mapped((UPS_EVENT_TYPES, "??"), (UPS_STATUS_CODE_TYPES, "2K")) is T.OUT_FOR_DELIVERY
    assert first_mapped((UPS_EVENT_TYPES, "??"), (UPS_STATUS_CODE_TYPES, "??")) is T.UNKNOWN


def test_usps_named_and_numeric_codes():
    assert lookup(USPS_EVENT_TYPES, "01") is T.DELIVERED
    assert lookup(USPS_EVENT_TYPES, "DELIVERY") is T.DELIVERED
    assert lookup(USPS_EVENT_TYPES, "OUT_FOR_DELIVERY") is T.OUT_FOR_DELIVERY
    assert lookup(USPS_EVENT_TYPES, "16") is T.AWAITING_CUSTOMER_PICKUP


def test_any_delivered():
    assert any_delivered(["OC", "dl"], FEDEX_DELIVERED_CODES)
    assert not any_delivered(["OC", "OD", None], FEDEX_DELIVERED_CODES)
    assert any_delivered(["10", "17"], USPS_DELIVERED_CODES)
    assert not any_delivered([], USPS_DELIVERED_CODES)
