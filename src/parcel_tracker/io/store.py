# src/parcel_tracker/io/store.py
from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from parcel_tracker.models import Parcel
from parcel_tracker.rules.classifier import normalize_tracking_number

DEFAULT_STORE_PATH = Path("~/.parcel_tracker/parcels.json")
STORE_VERSION = 1


class ParcelStore(Protocol):
    def all(self) -> list[Parcel]:
        ...

    def upsert(self, parcel: Parcel) -> None:
        ...

    def delete(self, parcel: Union[Parcel, str]) -> bool:
        ...


class JsonParcelStore:
    """Parcels persisted in one JSON file keyed by tracking number.

    File shape on disk:
        {"version": 1, "parcels": {"<tracking number>": {...Parcel.to_dict()...}}}

    Every operation is a locked read-modify-write; writes go through a temp
    file and os.replace.
    """

    def __init__(self, path: Union[str, Path], *, logger: Optional[logging.Logger] = None) -> None:
        self.path = Path(path).expanduser()
        self.logger = logger or logging.getLogger("parcel_tracker.io.store")
        self._lock = threading.Lock()

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        parcels = raw.get("parcels") if isinstance(raw, dict) else None
        if not isinstance(parcels, dict):
            raise ValueError(f"Unrecognized parcel store format: {self.path}")
        return parcels

    def _write(self, parcels: dict[str, dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump({"version": STORE_VERSION, "parcels": parcels}, fh, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def all(self) -> list[Parcel]:
        with self._lock:
            return [Parcel.from_dict(d) for d in self._read().values()]

    def get(self, tracking_number: str) -> Optional[Parcel]:
        with self._lock:
            d = self._read().get(normalize_tracking_number(tracking_number))
        return Parcel.from_dict(d) if d is not None else None

    def upsert(self, parcel: Parcel) -> None:
        """Insert or replace by tracking number.

        An error-only parcel keeps the stored data and name, recording the
        error alongside. A parcel still named after its number keeps a custom
        stored name.
        """
        with self._lock:
            parcels = self._read()
            previous = parcels.get(parcel.tracking_number)
            merged = parcel
            if previous is not None:
                old = Parcel.from_dict(previous)
                name = parcel.name
                if name == parcel.tracking_number and old.name:
                    name = old.name
                if not parcel.has_data() and old.has_data():
                    merged = replace(parcel, name=name, data=old.data)
                else:
                    merged = replace(parcel, name=name)
            parcels[parcel.tracking_number] = merged.to_dict()
            self._write(parcels)
        self.logger.debug("Stored %s (%s)", parcel.tracking_number, "error" if parcel.has_error() else "ok")

    def rename(self, tracking_number: str, name: str) -> bool:
        tn = normalize_tracking_number(tracking_number)
        with self._lock:
            parcels = self._read()
            if tn not in parcels:
                return False
            parcels[tn] = replace(Parcel.from_dict(parcels[tn]), name=name or tn).to_dict()
            self._write(parcels)
        return True

    def delete(self, parcel: Union[Parcel, str]) -> bool:
        tn = parcel.tracking_number if isinstance(parcel, Parcel) else normalize_tracking_number(parcel)
        with self._lock:
            parcels = self._read()
            if parcels.pop(tn, None) is None:
                return False
            self._write(parcels)
        self.logger.debug("Deleted %s", tn)
        return True
