from datetime import datetime, timedelta, timezone

import pytest

from parcel_tracker.io.render import format_event_history, format_event_oneline
from parcel_tracker.models import Carrier, Parcel, ParcelData, ParcelEvent, ParcelEventType

PST = timezone(timedelta(hours=-8), "PST")
T0 = datetime(2025, 2, 25, 11, 48, tzinfo=PST)

EXPECTED_TREE = (
    "└─┬─ • Tue, Feb 25 2025 11:48 Shipment information sent to FedEx @ Altoona, PA\n"
    "  ├─ • Tue, Feb 25 2025 12:48 Package arrived at FedEx location @ Los Angeles, CA\n"
    "  └─ ✓ Wed, Feb 26 2025 14:24 Delivered @ Los Angeles, CA\n"
)


def _events():
    created = ParcelEvent(ParcelEventType.ORDER_CONFIRMED, "Shipment information sent to FedEx", "Altoona, PA", T0)
    arrived = ParcelEvent(ParcelEventType.ARRIVED, "Package arrived at FedEx location", "Los Angeles, CA",
                          T0 + timedelta(hours=1))
    delivered = ParcelEvent(ParcelEventType.DELIVERED, "Delivered", "Los Angeles, CA",
                            T0 + timedelta(hours=26, minutes=36))
    # stored newest first; rendering sorts oldest first
    return [delivered, arrived, created]


def test_format_event_oneline():
    event = ParcelEvent(ParcelEventType.ORDER_CONFIRMED, "Shipment information sent to FedEx", "Altoona, PA", T0)
    assert format_event_oneline("441259201412", event) == (
        "Tue, Feb 25 2025 11:48 441259201412 Shipment information sent to FedEx @ Altoona, PA"
    )


def test_format_event_oneline_without_location():
    event = ParcelEvent(ParcelEventType.UNKNOWN, "Label printed", "", T0)
    assert format_event_oneline("X1", event) == "Tue, Feb 25 2025 11:48 X1 Label printed"


@pytest.mark.parametrize("name, carrier, delivered", [
    ("Test Parcel", Carrier.FEDEX, True),
    # header follows the last event, not the delivered flag
    ("New shoes", Carrier.UPS, False),
])
def test_format_event_history(name, carrier, delivered):
    parcel = Parcel(tracking_number="441259201412", carrier=carrier, name=name,
                    data=ParcelData(events=_events(), delivered=delivered))

    assert format_event_history(parcel) == f"✓ {name} ({carrier.value}) DELIVERED\n" + EXPECTED_TREE


def test_single_event_and_departed_header():
    event = ParcelEvent(ParcelEventType.DEPARTED, "On the way", "", T0)
    parcel = Parcel(tracking_number="1Z999AA10123456784", carrier=Carrier.UPS,
                    data=ParcelData(events=[event]))

    assert format_event_history(parcel) == (
        "• 1Z999AA10123456784 (UPS) DEPARTED\n"
        "└─── • Tue, Feb 25 2025 11:48 On the way\n"
    )


def test_error_and_empty_parcels():
    failed = Parcel.failed("441259201412", Carrier.FEDEX, "HTTP 503")
    assert format_event_history(failed) == "✗ 441259201412 (FedEx) ERROR: HTTP 503\n"

    empty = Parcel(tracking_number="441259201412", carrier=Carrier.FEDEX, data=ParcelData(events=[]))
    assert format_event_history(empty) == "• 441259201412 (FedEx) NO EVENTS\n"


def test_stale_data_with_refresh_error():
    parcel = Parcel(tracking_number="441259201412", carrier=Carrier.FEDEX, name="Test Parcel",
                    data=ParcelData(events=_events(), delivered=True), error="HTTP 503")
    out = format_event_history(parcel)
    assert out.endswith("  └─ ✓ Wed, Feb 26 2025 14:24 Delivered @ Los Angeles, CA\n  ✗ last refresh failed: HTTP 503\n")
