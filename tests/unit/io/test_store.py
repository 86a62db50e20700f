import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from parcel_tracker.io.store import JsonParcelStore
from parcel_tracker.models import Carrier, Parcel, ParcelData, ParcelEvent, ParcelEventType

TN = "441259201412"


def _tracked(name=""):
    ev = ParcelEvent(ParcelEventType.DELIVERED, "Delivered", "LOS ANGELES, CA",
                     datetime(2025, 2, 26, 22, 24, tzinfo=timezone.utc), "DL")
    return Parcel(tracking_number=TN, carrier=Carrier.FEDEX, name=name,
                  data=ParcelData(events=[ev], delivered=True))


def test_upsert_and_reload(tmp_path: Path):
    path = tmp_path / "nested" / "parcels.json"
    store = JsonParcelStore(path)
    store.upsert(_tracked("Shoes"))

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert list(raw["parcels"]) == [TN]

    again = JsonParcelStore(path)
    (parcel,) = again.all()
    assert parcel == _tracked("Shoes")
    assert again.get(TN.lower()) == parcel
    assert not (tmp_path / "nested" / "parcels.json.tmp").exists()


def test_error_only_refresh_keeps_data_and_name(tmp_path: Path):
    store = JsonParcelStore(tmp_path / "parcels.json")
    store.upsert(_tracked("Shoes"))

    store.upsert(Parcel.failed(TN, Carrier.FEDEX, "HTTP 503"))

    parcel = store.get(TN)
    assert parcel.name == "Shoes"
    assert parcel.error == "HTTP 503"
    assert parcel.has_data() and parcel.delivered


def test_successful_refresh_clears_error_and_keeps_custom_name(tmp_path: Path):
    store = JsonParcelStore(tmp_path / "parcels.json")
    store.upsert(_tracked("Shoes"))
    store.upsert(Parcel.failed(TN, Carrier.FEDEX, "HTTP 503"))

    store.upsert(_tracked())

    parcel = store.get(TN)
    assert parcel.name == "Shoes"
    assert parcel.error is None


def test_rename_and_delete(tmp_path: Path):
    store = JsonParcelStore(tmp_path / "parcels.json")
    store.upsert(_tracked())

    assert store.rename(TN, "Boots")
    assert store.get(TN).name == "Boots"
    assert not store.rename("1Z999AA10123456784", "Nope")

    assert store.delete(store.get(TN))
    assert not store.delete(TN)
    assert store.all() == []


def test_missing_file_is_empty_and_bad_file_raises(tmp_path: Path):
    assert JsonParcelStore(tmp_path / "absent.json").all() == []

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps(["not", "a", "store"]), encoding="utf-8")
    with pytest.raises(ValueError):
        JsonParcelStore(bad).all()
