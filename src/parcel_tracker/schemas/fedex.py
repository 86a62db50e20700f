# src/parcel_tracker/schemas/fedex.py
"""FedEx Track API v1 wire schema (POST /track/v1/trackingnumbers).

Only a handful of fields drive normalization (scan events, status detail,
date/times, errors); the rest are kept so callers can inspect them without
reaching back into raw JSON.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from .common import Measure, Money, as_dict, as_list, bool_string, format_location, parse_optional_timestamp, text

# dateAndTimes[].type
DATE_TYPE_ACTUAL_DELIVERY = "ACTUAL_DELIVERY"
DATE_TYPE_ACTUAL_PICKUP = "ACTUAL_PICKUP"
DATE_TYPE_ACTUAL_TENDER = "ACTUAL_TENDER"
DATE_TYPE_ANTICIPATED_TENDER = "ANTICIPATED_TENDER"
DATE_TYPE_APPOINTMENT_DELIVERY = "APPOINTMENT_DELIVERY"
DATE_TYPE_ATTEMPTED_DELIVERY = "ATTEMPTED_DELIVERY"
DATE_TYPE_COMMITMENT = "COMMITMENT"
DATE_TYPE_ESTIMATED_ARRIVAL_AT_GATEWAY = "ESTIMATED_ARRIVAL_AT_GATEWAY"
DATE_TYPE_ESTIMATED_DELIVERY = "ESTIMATED_DELIVERY"
DATE_TYPE_ESTIMATED_PICKUP = "ESTIMATED_PICKUP"
DATE_TYPE_ESTIMATED_RETURN_TO_STATION = "ESTIMATED_RETURN_TO_STATION"
DATE_TYPE_SHIP = "SHIP"
DATE_TYPE_SHIPMENT_DATA_RECEIVED = "SHIPMENT_DATA_RECEIVED"

# Entries that project a future delivery; ACTUAL_DELIVERY is deliberately absent.
SCHEDULED_DELIVERY_DATE_TYPES: frozenset[str] = frozenset({
    DATE_TYPE_ESTIMATED_DELIVERY,
    DATE_TYPE_COMMITMENT,
    DATE_TYPE_APPOINTMENT_DELIVERY,
})

MAX_TRACKING_NUMBERS_PER_REQUEST = 30


@dataclass(frozen=True)
class Address:
    street_lines: tuple[str, ...] = ()
    city: str = ""
    state_or_province_code: str = ""
    postal_code: str = ""
    country_code: str = ""
    country_name: str = ""
    residential: bool = False
    classification: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "Address":
        m = as_dict(d)
        return cls(
            street_lines=tuple(text(s) for s in as_list(m.get("streetLines"))),
            city=text(m.get("city")),
            state_or_province_code=text(m.get("stateOrProvinceCode")),
            postal_code=text(m.get("postalCode")),
            country_code=text(m.get("countryCode")),
            country_name=text(m.get("countryName")),
            residential=bool_string(m.get("residential")),
            classification=text(m.get("addressClassification")),
        )

    def location(self) -> str:
        return format_location(self.city, self.state_or_province_code, self.postal_code, self.country_code)


@dataclass(frozen=True)
class AncillaryDetail:
    reason: str = ""
    reason_description: str = ""
    action: str = ""
    action_description: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "AncillaryDetail":
        m = as_dict(d)
        return cls(
            reason=text(m.get("reason")),
            reason_description=text(m.get("reasonDescription")),
            action=text(m.get("action")),
            action_description=text(m.get("actionDescription")),
        )


@dataclass(frozen=True)
class DelayDetail:
    type: str = ""       # WEATHER | OPERATIONAL | LOCAL | GENERAL | CLEARANCE
    sub_type: str = ""
    status: str = ""     # DELAYED | ON_TIME | EARLY

    @classmethod
    def from_dict(cls, d: object) -> "DelayDetail":
        m = as_dict(d)
        return cls(type=text(m.get("type")), sub_type=text(m.get("subType")), status=text(m.get("status")))


@dataclass(frozen=True)
class StatusDetail:
    code: str = ""
    derived_code: str = ""
    status_by_locale: str = ""
    description: str = ""
    scan_location: Address = field(default_factory=Address)
    ancillary_details: tuple[AncillaryDetail, ...] = ()
    delay_detail: DelayDetail = field(default_factory=DelayDetail)

    @classmethod
    def from_dict(cls, d: object) -> "StatusDetail":
        m = as_dict(d)
        code = text(m.get("code"))
        return cls(
            code=code,
            derived_code=text(m.get("derivedCode")) or code,
            status_by_locale=text(m.get("statusByLocale")),
            description=text(m.get("description")),
            scan_location=Address.from_dict(m.get("scanLocation")),
            ancillary_details=tuple(AncillaryDetail.from_dict(a) for a in as_list(m.get("ancillaryDetails"))),
            delay_detail=DelayDetail.from_dict(m.get("delayDetail")),
        )


@dataclass(frozen=True)
class ScanEvent:
    date: Optional[datetime]
    event_type: str = ""
    event_description: str = ""
    derived_status: str = ""
    derived_status_code: str = ""
    exception_code: str = ""
    exception_description: str = ""
    location_id: str = ""
    location_type: str = ""
    scan_location: Address = field(default_factory=Address)
    delay_detail: DelayDetail = field(default_factory=DelayDetail)

    @classmethod
    def from_dict(cls, d: object) -> "ScanEvent":
        m = as_dict(d)
        return cls(
            date=parse_optional_timestamp(m.get("date")),
            event_type=text(m.get("eventType")),
            event_description=text(m.get("eventDescription")),
            derived_status=text(m.get("derivedStatus")),
            derived_status_code=text(m.get("derivedStatusCode")),
            exception_code=text(m.get("exceptionCode")),
            exception_description=text(m.get("exceptionDescription")),
            location_id=text(m.get("locationId")),
            location_type=text(m.get("locationType")),
            scan_location=Address.from_dict(m.get("scanLocation")),
            delay_detail=DelayDetail.from_dict(m.get("delayDetail")),
        )


@dataclass(frozen=True)
class DateAndTime:
    type: str
    date_time: Optional[datetime]

    @classmethod
    def from_dict(cls, d: object) -> "DateAndTime":
        m = as_dict(d)
        return cls(type=text(m.get("type")), date_time=parse_optional_timestamp(m.get("dateTime")))


@dataclass(frozen=True)
class DeliveryWindow:
    type: str = ""
    description: str = ""
    begins: Optional[datetime] = None
    ends: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: object) -> "DeliveryWindow":
        m = as_dict(d)
        w = as_dict(m.get("window"))
        return cls(
            type=text(m.get("type")),
            description=text(m.get("description")),
            begins=parse_optional_timestamp(w.get("begins")),
            ends=parse_optional_timestamp(w.get("ends")),
        )


@dataclass(frozen=True)
class DeliveryDetails:
    received_by_name: str = ""
    signed_by_name: str = ""
    location_description: str = ""
    location_type: str = ""
    delivery_attempts: str = ""
    delivery_today: bool = False
    destination_service_area: str = ""
    actual_delivery_address: Address = field(default_factory=Address)

    @classmethod
    def from_dict(cls, d: object) -> "DeliveryDetails":
        m = as_dict(d)
        return cls(
            received_by_name=text(m.get("receivedByName")),
            signed_by_name=text(m.get("signedByName")),
            location_description=text(m.get("locationDescription")),
            location_type=text(m.get("locationType")),
            delivery_attempts=text(m.get("deliveryAttempts")),
            delivery_today=bool_string(m.get("deliveryToday")),
            destination_service_area=text(m.get("destinationServiceArea")),
            actual_delivery_address=Address.from_dict(m.get("actualDeliveryAddress")),
        )


@dataclass(frozen=True)
class ServiceDetail:
    type: str = ""
    description: str = ""
    short_description: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "ServiceDetail":
        m = as_dict(d)
        return cls(
            type=text(m.get("type")),
            description=text(m.get("description")),
            short_description=text(m.get("shortDescription")),
        )


@dataclass(frozen=True)
class PackageDetails:
    packaging_type: str = ""
    sequence_number: str = ""
    count: str = ""
    content_piece_count: str = ""
    undelivered_count: str = ""
    weight: tuple[Measure, ...] = ()
    declared_value: Money = field(default_factory=Money)

    @classmethod
    def from_dict(cls, d: object) -> "PackageDetails":
        m = as_dict(d)
        wd = as_dict(m.get("weightAndDimensions"))
        return cls(
            packaging_type=text(as_dict(m.get("packagingDescription")).get("type") or m.get("physicalPackagingType")),
            sequence_number=text(m.get("sequenceNumber")),
            count=text(m.get("count")),
            content_piece_count=text(m.get("contentPieceCount")),
            undelivered_count=text(m.get("undeliveredCount")),
            weight=tuple(Measure.from_dict(w) for w in as_list(wd.get("weight"))),
            declared_value=Money.from_dict(m.get("declaredValue")),
        )


@dataclass(frozen=True)
class ErrorInfo:
    code: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, d: object) -> Optional["ErrorInfo"]:
        m = as_dict(d)
        if not m:
            return None
        return cls(code=text(m.get("code")), message=text(m.get("message")))

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" if self.message else self.code


@dataclass(frozen=True)
class TrackResult:
    tracking_number: str
    carrier_code: str = ""
    tracking_number_unique_id: str = ""
    latest_status_detail: StatusDetail = field(default_factory=StatusDetail)
    scan_events: tuple[ScanEvent, ...] = ()
    date_and_times: tuple[DateAndTime, ...] = ()
    service_detail: ServiceDetail = field(default_factory=ServiceDetail)
    delivery_details: DeliveryDetails = field(default_factory=DeliveryDetails)
    package_details: PackageDetails = field(default_factory=PackageDetails)
    origin_location: Address = field(default_factory=Address)
    destination_location: Address = field(default_factory=Address)
    recipient_address: Address = field(default_factory=Address)
    shipper_address: Address = field(default_factory=Address)
    estimated_delivery_time_window: DeliveryWindow = field(default_factory=DeliveryWindow)
    standard_transit_time_window: DeliveryWindow = field(default_factory=DeliveryWindow)
    available_images: tuple[str, ...] = ()
    special_handlings: tuple[str, ...] = ()
    information_notes: tuple[str, ...] = ()
    service_commit_message: str = ""
    error: Optional[ErrorInfo] = None

    @classmethod
    def from_dict(cls, d: object) -> "TrackResult":
        m = as_dict(d)
        tni = as_dict(m.get("trackingNumberInfo"))
        return cls(
            tracking_number=text(tni.get("trackingNumber")),
            carrier_code=text(tni.get("carrierCode")),
            tracking_number_unique_id=text(tni.get("trackingNumberUniqueId")),
            latest_status_detail=StatusDetail.from_dict(m.get("latestStatusDetail")),
            scan_events=tuple(ScanEvent.from_dict(e) for e in as_list(m.get("scanEvents"))),
            date_and_times=tuple(DateAndTime.from_dict(x) for x in as_list(m.get("dateAndTimes"))),
            service_detail=ServiceDetail.from_dict(m.get("serviceDetail")),
            delivery_details=DeliveryDetails.from_dict(m.get("deliveryDetails")),
            package_details=PackageDetails.from_dict(m.get("packageDetails")),
            origin_location=Address.from_dict(
                as_dict(as_dict(m.get("originLocation")).get("locationContactAndAddress")).get("address")),
            destination_location=Address.from_dict(
                as_dict(as_dict(m.get("destinationLocation")).get("locationContactAndAddress")).get("address")),
            recipient_address=Address.from_dict(as_dict(m.get("recipientInformation")).get("address")),
            shipper_address=Address.from_dict(as_dict(m.get("shipperInformation")).get("address")),
            estimated_delivery_time_window=DeliveryWindow.from_dict(m.get("estimatedDeliveryTimeWindow")),
            standard_transit_time_window=DeliveryWindow.from_dict(m.get("standardTransitTimeWindow")),
            available_images=tuple(text(as_dict(i).get("type")) for i in as_list(m.get("availableImages"))),
            special_handlings=tuple(text(as_dict(s).get("type")) for s in as_list(m.get("specialHandlings"))),
            information_notes=tuple(
                text(as_dict(n).get("description")) for n in as_list(m.get("informationNotes"))),
            service_commit_message=text(as_dict(m.get("serviceCommitMessage")).get("message")),
            error=ErrorInfo.from_dict(m.get("error")),
        )


def tracking_request(tracking_numbers: list[str], *, include_detailed_scans: bool = True) -> dict[str, Any]:
    """Request body for up to MAX_TRACKING_NUMBERS_PER_REQUEST numbers."""
    return {
        "includeDetailedScans": include_detailed_scans,
        "trackingInfo": [{"trackingNumberInfo": {"trackingNumber": tn}} for tn in tracking_numbers],
    }


def error_message(body: Mapping[str, Any]) -> str:
    """Flatten a FedEx error envelope: {"errors": [{"code", "message"}]}."""
    parts = []
    for e in as_list(as_dict(body).get("errors")):
        info = ErrorInfo.from_dict(e)
        if info is not None:
            parts.append(str(info))
    return "; ".join(parts)
