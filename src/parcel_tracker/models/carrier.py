# src/parcel_tracker/models/carrier.py
from __future__ import annotations

from enum import Enum
from urllib.parse import quote


class Carrier(str, Enum):
    FEDEX = "FedEx"
    UPS = "UPS"
    USPS = "USPS"
    DHL = "DHL"
    AMAZON = "Amazon"
    ONTRAC = "OnTrac"
    LASERSHIP = "LaserShip"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: object) -> "Carrier":
        """Case-insensitive lookup by value or member name; anything else is UNKNOWN."""
        if isinstance(value, Carrier):
            return value
        text = str(value or "").strip().casefold()
        for member in cls:
            if text in (member.value.casefold(), member.name.casefold()):
                return member
        return cls.UNKNOWN


# Deep links are built from the tracking number alone.
_TRACKING_URLS: dict[Carrier, str] = {
    Carrier.FEDEX: "https://www.fedex.com/fedextrack/?trknbr={tn}",
    Carrier.UPS: "https://www.ups.com/track?tracknum={tn}",
    Carrier.USPS: "https://tools.usps.com/go/TrackConfirmAction?tLabels={tn}",
    Carrier.DHL: "https://www.dhl.com/us-en/home/tracking.html?tracking-id={tn}",
    Carrier.AMAZON: "https://track.amazon.com/tracking/{tn}",
    Carrier.ONTRAC: "https://www.ontrac.com/tracking/?number={tn}",
    Carrier.LASERSHIP: "https://www.lasership.com/track/{tn}",
}


def tracking_url(carrier: Carrier, tracking_number: str) -> str:
    template = _TRACKING_URLS.get(carrier)
    if template is None:
        return ""
    return template.format(tn=quote(str(tracking_number), safe=""))
