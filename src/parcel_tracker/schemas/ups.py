# src/parcel_tracker/schemas/ups.py
"""UPS Tracking API v1 wire schema (GET /api/track/v1/details/{inquiryNumber})."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from .common import (
    COMPACT_DATE_FORMATS,
    COMPACT_TIMESTAMP_FORMATS,
    as_dict,
    as_list,
    bool_string,
    format_location,
    parse_timestamp,
    text,
)

# deliveryDate[].type
DELIVERY_DATE_SCHEDULED = "SDD"
DELIVERY_DATE_RESCHEDULED = "RDD"
DELIVERY_DATE_DELIVERED = "DEL"

PROJECTED_DELIVERY_DATE_TYPES: frozenset[str] = frozenset({DELIVERY_DATE_SCHEDULED, DELIVERY_DATE_RESCHEDULED})

DEFAULT_QUERY = {
    "locale": "en_US",
    "returnSignature": "false",
    "returnMilestones": "false",
    "returnPOD": "false",
}


def parse_compact(date: str, time: str = "") -> datetime:
    """Parse UPS YYYYMMDD (+ HHMMSS) fields; date-only input is accepted."""
    value = f"{text(date)}{text(time)}"
    # strptime tolerates single-digit fields, so pin the widths first
    if not (value.isascii() and value.isdigit() and len(value) in (8, 12, 14)):
        raise ValueError(f"unrecognized UPS date/time: {value!r}")
    return parse_timestamp(value, COMPACT_TIMESTAMP_FORMATS, COMPACT_DATE_FORMATS)


@dataclass(frozen=True)
class Address:
    address_lines: tuple[str, ...] = ()
    city: str = ""
    state_province: str = ""
    postal_code: str = ""
    country: str = ""
    country_code: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "Address":
        m = as_dict(d)
        lines = tuple(
            text(m.get(k)) for k in ("addressLine1", "addressLine2", "addressLine3") if text(m.get(k))
        )
        return cls(
            address_lines=lines,
            city=text(m.get("city")),
            state_province=text(m.get("stateProvince")),
            postal_code=text(m.get("postalCode")),
            country=text(m.get("country")),
            country_code=text(m.get("countryCode")),
        )

    def location(self) -> str:
        return format_location(self.city, self.state_province, self.postal_code, self.country_code)


@dataclass(frozen=True)
class Status:
    type: str = ""
    code: str = ""
    status_code: str = ""
    description: str = ""
    simplified_text_description: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "Status":
        m = as_dict(d)
        return cls(
            type=text(m.get("type")),
            code=text(m.get("code")),
            status_code=text(m.get("statusCode")),
            description=text(m.get("description")),
            simplified_text_description=text(m.get("simplifiedTextDescription")),
        )


@dataclass(frozen=True)
class Activity:
    date: str = ""
    time: str = ""
    gmt_date: str = ""
    gmt_time: str = ""
    gmt_offset: str = ""
    location: Address = field(default_factory=Address)
    slic: str = ""
    status: Status = field(default_factory=Status)

    @classmethod
    def from_dict(cls, d: object) -> "Activity":
        m = as_dict(d)
        loc = as_dict(m.get("location"))
        return cls(
            date=text(m.get("date")),
            time=text(m.get("time")),
            gmt_date=text(m.get("gmtDate")),
            gmt_time=text(m.get("gmtTime")),
            gmt_offset=text(m.get("gmtOffset")),
            location=Address.from_dict(loc.get("address")),
            slic=text(loc.get("slic")),
            status=Status.from_dict(m.get("status")),
        )

    def timestamp(self) -> datetime:
        return parse_compact(self.date, self.time)


@dataclass(frozen=True)
class DeliveryDate:
    type: str
    date: str

    @classmethod
    def from_dict(cls, d: object) -> "DeliveryDate":
        m = as_dict(d)
        return cls(type=text(m.get("type")), date=text(m.get("date")))


@dataclass(frozen=True)
class DeliveryTime:
    type: str = ""
    start_time: str = ""
    end_time: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "DeliveryTime":
        m = as_dict(d)
        return cls(type=text(m.get("type")), start_time=text(m.get("startTime")), end_time=text(m.get("endTime")))


@dataclass(frozen=True)
class DeliveryInformation:
    location: str = ""
    received_by: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "DeliveryInformation":
        m = as_dict(d)
        return cls(location=text(m.get("location")), received_by=text(m.get("receivedBy")))


@dataclass(frozen=True)
class PackageAddress:
    type: str = ""
    name: str = ""
    attention_name: str = ""
    address: Address = field(default_factory=Address)

    @classmethod
    def from_dict(cls, d: object) -> "PackageAddress":
        m = as_dict(d)
        return cls(
            type=text(m.get("type")),
            name=text(m.get("name")),
            attention_name=text(m.get("attentionName")),
            address=Address.from_dict(m.get("address")),
        )


@dataclass(frozen=True)
class Package:
    tracking_number: str
    activity: tuple[Activity, ...] = ()
    current_status: Status = field(default_factory=Status)
    delivery_date: tuple[DeliveryDate, ...] = ()
    delivery_time: DeliveryTime = field(default_factory=DeliveryTime)
    delivery_information: DeliveryInformation = field(default_factory=DeliveryInformation)
    package_address: tuple[PackageAddress, ...] = ()
    alternate_tracking_numbers: tuple[str, ...] = ()
    package_count: int = 0
    additional_attributes: tuple[str, ...] = ()
    additional_services: tuple[str, ...] = ()
    is_smart_package: bool = False

    @classmethod
    def from_dict(cls, d: object) -> "Package":
        m = as_dict(d)
        try:
            count = int(m.get("packageCount") or 0)
        except (TypeError, ValueError):
            count = 0
        return cls(
            tracking_number=text(m.get("trackingNumber")),
            activity=tuple(Activity.from_dict(a) for a in as_list(m.get("activity"))),
            current_status=Status.from_dict(m.get("currentStatus")),
            delivery_date=tuple(DeliveryDate.from_dict(x) for x in as_list(m.get("deliveryDate"))),
            delivery_time=DeliveryTime.from_dict(m.get("deliveryTime")),
            delivery_information=DeliveryInformation.from_dict(m.get("deliveryInformation")),
            package_address=tuple(PackageAddress.from_dict(a) for a in as_list(m.get("packageAddress"))),
            alternate_tracking_numbers=tuple(
                text(as_dict(a).get("number")) for a in as_list(m.get("alternateTrackingNumber"))),
            package_count=count,
            additional_attributes=tuple(text(a) for a in as_list(m.get("additionalAttributes"))),
            additional_services=tuple(text(s) for s in as_list(m.get("additionalServices"))),
            is_smart_package=bool_string(m.get("isSmartPackage")),
        )


@dataclass(frozen=True)
class Shipment:
    inquiry_number: str = ""
    packages: tuple[Package, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, d: object) -> "Shipment":
        m = as_dict(d)
        return cls(
            inquiry_number=text(m.get("inquiryNumber")),
            packages=tuple(Package.from_dict(p) for p in as_list(m.get("package"))),
            warnings=tuple(
                f"{text(as_dict(w).get('code'))}: {text(as_dict(w).get('message'))}"
                for w in as_list(m.get("warnings"))
            ),
        )


@dataclass(frozen=True)
class TrackingResponse:
    shipments: tuple[Shipment, ...] = ()

    @classmethod
    def from_dict(cls, d: object) -> "TrackingResponse":
        tr = as_dict(as_dict(d).get("trackResponse"))
        return cls(shipments=tuple(Shipment.from_dict(s) for s in as_list(tr.get("shipment"))))

    def packages(self) -> list[Package]:
        return [p for s in self.shipments for p in s.packages]


@dataclass(frozen=True)
class TokenResponse:
    access_token: str
    expires_in: int
    token_type: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "TokenResponse":
        m = as_dict(d)
        # UPS sends expires_in as a string
        return cls(
            access_token=text(m.get("access_token")),
            expires_in=int(text(m.get("expires_in")) or 0),
            token_type=text(m.get("token_type")),
            status=text(m.get("status")),
        )


def error_message(body: Mapping[str, Any]) -> str:
    """Flatten {"response": {"errors": [{"code", "message"}]}}."""
    errors = as_list(as_dict(as_dict(body).get("response")).get("errors"))
    parts = []
    for e in errors:
        m = as_dict(e)
        code, msg = text(m.get("code")), text(m.get("message"))
        parts.append(f"{code}: {msg}" if msg else code)
    return "; ".join(p for p in parts if p)


def shipment_warnings(response: Optional[TrackingResponse]) -> list[str]:
    if response is None:
        return []
    return [w for s in response.shipments for w in s.warnings]
