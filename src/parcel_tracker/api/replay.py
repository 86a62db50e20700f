# src/parcel_tracker/api/replay.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from parcel_tracker.models import Carrier, Parcel, ParcelData
from parcel_tracker.rules.classifier import classify, normalize_tracking_number

from . import fedex, ups, usps
from .base import CarrierClient
from .errors import CarrierResponseError

# Raw body -> ParcelData, per carrier; the same parsing the live clients use.
PARSERS: dict[Carrier, Callable[[str, Mapping[str, Any]], ParcelData]] = {
    Carrier.FEDEX: fedex.parse_response,
    Carrier.UPS: ups.parse_response,
    Carrier.USPS: usps.parse_response,
}


@dataclass(frozen=True)
class ReplayEntry:
    carrier: Carrier
    body: Mapping[str, Any]


@dataclass
class ReplayClient(CarrierClient):
    """Replay client that serves saved API bodies from a single JSON file.

    The file may be an object keyed by tracking number
    (``{"<tn>": {"carrier": "UPS", "body": {...}}}``) or a list of
    ``{"trackingNumber", "carrier", "body"}`` entries. When an entry omits the
    carrier, the tracking number is classified. Bodies go through the same
    parsers as live responses.
    """

    path: Path
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("parcel_tracker.api.replay"))
    _index: dict[str, ReplayEntry] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if not self.path.exists():
            raise ValueError(f"Replay file does not exist: {self.path}")
        if not self.path.is_file():
            raise ValueError(f"Replay path must be a JSON file, not a directory: {self.path}")

        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if isinstance(raw, Mapping):
            items = [(tn, entry) for tn, entry in raw.items()]
        elif isinstance(raw, list):
            items = [(e.get("trackingNumber"), e) for e in raw if isinstance(e, Mapping)]
        else:
            raise ValueError(f"Replay file must hold a JSON object or array: {self.path}")

        for tn_raw, entry in items:
            tn = normalize_tracking_number(tn_raw)
            if not tn or not isinstance(entry, Mapping):
                continue
            carrier = Carrier.parse(entry.get("carrier")) if entry.get("carrier") else classify(tn)
            body = entry.get("body")
            self._index[tn] = ReplayEntry(carrier=carrier, body=body if isinstance(body, Mapping) else {})
        self.logger.debug("Replay index built from %s (%d numbers)", self.path, len(self._index))

    def carriers(self) -> list[Carrier]:
        """Carriers with at least one saved body, in first-seen order."""
        seen: list[Carrier] = []
        for entry in self._index.values():
            if entry.carrier not in seen:
                seen.append(entry.carrier)
        return seen

    def authenticate(self) -> str:
        return ""

    def body_for(self, tracking_number: str) -> Optional[ReplayEntry]:
        return self._index.get(normalize_tracking_number(tracking_number))

    def track(self, tracking_numbers: list[str]) -> list[Parcel]:
        return [self._replay_one(normalize_tracking_number(tn)) for tn in tracking_numbers]

    def _replay_one(self, tracking_number: str) -> Parcel:
        entry = self._index.get(tracking_number)
        carrier = entry.carrier if entry else classify(tracking_number)
        if entry is None:
            return Parcel.failed(tracking_number, carrier, f"no saved response for {tracking_number}")

        parser = PARSERS.get(carrier)
        if parser is None:
            return Parcel.failed(tracking_number, carrier, f"replay not supported for carrier {carrier}")
        try:
            data = parser(tracking_number, entry.body)
        except (CarrierResponseError, ValueError) as ex:
            return Parcel.failed(tracking_number, carrier, ex)
        return Parcel(tracking_number=tracking_number, carrier=carrier, data=data)
