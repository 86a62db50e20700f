import itertools
from datetime import datetime, timedelta, timezone

from parcel_tracker.models import (
    Carrier,
    Parcel,
    ParcelData,
    ParcelEvent,
    ParcelEventType,
    latest_event,
)

PST = timezone(timedelta(hours=-8))


def _events():
    t0 = datetime(2025, 2, 25, 11, 48, tzinfo=PST)
    return [
        ParcelEvent(ParcelEventType.ORDER_CONFIRMED, "Label created", "ALTOONA, PA", t0, "OC"),
        ParcelEvent(ParcelEventType.ARRIVED, "Arrived", "LOS ANGELES, CA", t0 + timedelta(hours=1), "AR"),
        ParcelEvent(ParcelEventType.DELIVERED, "Delivered", "LOS ANGELES, CA", t0 + timedelta(hours=26), "DL"),
    ]


def test_last_event_is_independent_of_order():
    events = _events()
    expected = events[-1]
    for perm in itertools.permutations(events):
        assert ParcelData(events=list(perm)).last_event() == expected


def test_last_event_ties_are_deterministic():
    ts = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    a = ParcelEvent(ParcelEventType.ARRIVED, "A", "X", ts)
    b = ParcelEvent(ParcelEventType.DEPARTED, "B", "X", ts)
    assert latest_event([a, b]) == latest_event([b, a]) == b


def test_last_event_compares_naive_as_utc():
    aware = ParcelEvent(ParcelEventType.ARRIVED, "aware", "", datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc))
    naive = ParcelEvent(ParcelEventType.ARRIVED, "naive", "", datetime(2025, 1, 1, 11, 0))
    assert latest_event([aware, naive]) is naive
    assert latest_event([]) is None


def test_parcel_defaults_name_and_url():
    p = Parcel(tracking_number="441259201412", carrier=Carrier.FEDEX)
    assert p.name == "441259201412"
    assert p.tracking_url == "https://www.fedex.com/fedextrack/?trknbr=441259201412"
    assert not p.has_data() and not p.has_error()
    assert p.last_event() is None


def test_failed_parcel_carries_message():
    p = Parcel.failed("1Z999AA10123456784", Carrier.UPS, RuntimeError("boom"))
    assert p.has_error() and not p.has_data()
    assert p.error == "boom"
    assert Parcel.failed("X", Carrier.UNKNOWN, ValueError()).error == "ValueError"


def test_parcel_dict_round_trip():
    data = ParcelData(events=_events(), delivered=True,
                      delivery_projection=datetime(2025, 2, 27, tzinfo=PST))
    p = Parcel(tracking_number="441259201412", carrier=Carrier.FEDEX, name="Shoes", data=data)

    d = p.to_dict()
    assert d["carrier"] == "FedEx"
    assert d["data"]["events"][0]["type"] == "ORDER CONFIRMED"

    back = Parcel.from_dict(d)
    assert back == p
    assert back.delivered
    assert back.last_event().code == "DL"


def test_enum_parsing_is_lenient():
    assert Carrier.parse("fedex") is Carrier.FEDEX
    assert Carrier.parse("LASERSHIP") is Carrier.LASERSHIP
    assert Carrier.parse("pony express") is Carrier.UNKNOWN
    assert ParcelEventType.parse("OUT FOR DELIVERY") is ParcelEventType.OUT_FOR_DELIVERY
    assert ParcelEventType.parse("nope") is ParcelEventType.UNKNOWN
