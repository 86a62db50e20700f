# src/parcel_tracker/models/parcel.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from .carrier import Carrier, tracking_url


class ParcelEventType(str, Enum):
    ORDER_CONFIRMED = "ORDER CONFIRMED"
    EXPECTED_ON_TIME = "EXPECTED ON TIME"
    PICKED_UP = "PICKED UP"
    DEPARTED = "DEPARTED"
    PROCESSING = "PROCESSING"
    ARRIVED = "ARRIVED"
    ON_VEHICLE = "ON DELIVERY VEHICLE"
    OUT_FOR_DELIVERY = "OUT FOR DELIVERY"
    DELIVERED = "DELIVERED"
    DELAYED = "DELAYED"
    HELD = "HELD"
    AWAITING_CUSTOMER_ACTION = "AWAITING CUSTOMER ACTION"
    AWAITING_CUSTOMER_PICKUP = "AWAITING CUSTOMER PICKUP"
    TRANSFERRED_TO_LOCAL = "TRANSFERRED TO LOCAL CARRIER"
    UNDELIVERABLE = "UNDELIVERABLE"
    RETURNED_TO_SENDER = "RETURNED TO SENDER"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: object) -> "ParcelEventType":
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


def utc_sort_key(ts: datetime) -> datetime:
    # Naive carrier timestamps are compared as if they were UTC.
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts is not None else None


def _from_iso(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class ParcelEvent:
    type: ParcelEventType
    description: str
    location: str
    timestamp: datetime
    code: str = ""  # carrier-native status/event code

    def sort_key(self) -> tuple:
        return (utc_sort_key(self.timestamp), self.description, self.location, self.type.value, self.code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "description": self.description,
            "location": self.location,
            "timestamp": _iso(self.timestamp),
            "code": self.code,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ParcelEvent":
        return cls(
            type=ParcelEventType.parse(d.get("type")),
            description=str(d.get("description") or ""),
            location=str(d.get("location") or ""),
            timestamp=_from_iso(d.get("timestamp")) or datetime.min,
            code=str(d.get("code") or ""),
        )


def latest_event(events: list[ParcelEvent]) -> Optional[ParcelEvent]:
    """Return the event with the greatest timestamp, independent of list order."""
    if not events:
        return None
    return max(events, key=ParcelEvent.sort_key)


@dataclass
class ParcelData:
    events: list[ParcelEvent] = field(default_factory=list)
    delivered: bool = False
    delivery_projection: Optional[datetime] = None

    def last_event(self) -> Optional[ParcelEvent]:
        return latest_event(self.events)

    def to_dict(self) -> dict[str, Any]:
        return {
            "events": [e.to_dict() for e in self.events],
            "delivered": self.delivered,
            "delivery_projection": _iso(self.delivery_projection),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ParcelData":
        return cls(
            events=[ParcelEvent.from_dict(e) for e in d.get("events") or []],
            delivered=bool(d.get("delivered", False)),
            delivery_projection=_from_iso(d.get("delivery_projection")),
        )


@dataclass
class Parcel:
    """One tracked shipment, keyed by tracking number.

    In steady state exactly one of `data` / `error` is set. A parcel may briefly
    hold neither before its first fetch; such parcels are never handed to
    consumers by the orchestrator.
    """

    tracking_number: str
    carrier: Carrier
    name: str = ""
    tracking_url: str = ""
    data: Optional[ParcelData] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.tracking_number
        if not self.tracking_url:
            self.tracking_url = tracking_url(self.carrier, self.tracking_number)

    @classmethod
    def failed(cls, tracking_number: str, carrier: Carrier, error: object) -> "Parcel":
        return cls(tracking_number=tracking_number, carrier=carrier, error=str(error) or type(error).__name__)

    def has_data(self) -> bool:
        return self.data is not None

    def has_error(self) -> bool:
        return bool(self.error)

    @property
    def delivered(self) -> bool:
        return bool(self.data and self.data.delivered)

    def last_event(self) -> Optional[ParcelEvent]:
        if self.data is None:
            return None
        return self.data.last_event()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "carrier": self.carrier.value,
            "tracking_number": self.tracking_number,
            "tracking_url": self.tracking_url,
            "data": self.data.to_dict() if self.data is not None else None,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Parcel":
        data = d.get("data")
        return cls(
            tracking_number=str(d.get("tracking_number") or ""),
            carrier=Carrier.parse(d.get("carrier")),
            name=str(d.get("name") or ""),
            tracking_url=str(d.get("tracking_url") or ""),
            data=ParcelData.from_dict(data) if isinstance(data, dict) else None,
            error=d.get("error") or None,
        )
