# src/parcel_tracker/schemas/usps.py
"""USPS Tracking API v3 wire schema (GET /tracking/v3/tracking/{trackingNumber})."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from .common import as_dict, as_list, bool_string, format_location, parse_optional_timestamp, text

TOKEN_STATUS_APPROVED = "approved"
TRACKING_SCOPE = "tracking"


@dataclass(frozen=True)
class TrackingEvent:
    event_type: str = ""
    event_timestamp: Optional[datetime] = None
    gmt_timestamp: Optional[datetime] = None
    gmt_offset: str = ""
    event_city: str = ""
    event_state: str = ""
    event_zip: str = ""
    event_country: str = ""
    firm: str = ""
    name: str = ""
    authorized_agent: bool = False
    event_code: str = ""
    action_code: str = ""
    reason_code: str = ""

    @classmethod
    def from_dict(cls, d: object) -> "TrackingEvent":
        m = as_dict(d)
        return cls(
            event_type=text(m.get("eventType")),
            event_timestamp=parse_optional_timestamp(m.get("eventTimestamp")),
            gmt_timestamp=parse_optional_timestamp(m.get("GMTTimestamp")),
            gmt_offset=text(m.get("GMTOffset")),
            event_city=text(m.get("eventCity")),
            event_state=text(m.get("eventState")),
            event_zip=text(m.get("eventZIP")),
            event_country=text(m.get("eventCountry")),
            firm=text(m.get("firm")),
            name=text(m.get("name")),
            authorized_agent=bool_string(m.get("authorizedAgent")),
            event_code=text(m.get("eventCode")),
            action_code=text(m.get("actionCode")),
            reason_code=text(m.get("reasonCode")),
        )

    def location(self) -> str:
        return format_location(self.event_city, self.event_state, self.event_zip, self.event_country)


@dataclass(frozen=True)
class TrackingResponse:
    tracking_number: str
    mail_class: str = ""
    mail_type: str = ""
    status: str = ""
    status_category: str = ""
    status_summary: str = ""
    origin_city: str = ""
    origin_state: str = ""
    origin_zip: str = ""
    origin_country: str = ""
    destination_city: str = ""
    destination_state: str = ""
    destination_zip: str = ""
    destination_country_code: str = ""
    expected_delivery_timestamp: Optional[datetime] = None
    expected_delivery_type: str = ""
    guaranteed_delivery_timestamp: Optional[datetime] = None
    predicted_delivery_timestamp: Optional[datetime] = None
    predicted_delivery_date: Optional[datetime] = None
    predicted_delivery_window_start_time: str = ""
    predicted_delivery_window_end_time: str = ""
    on_time: bool = False
    services: tuple[str, ...] = ()
    tracking_events: tuple[TrackingEvent, ...] = ()

    @classmethod
    def from_dict(cls, d: object) -> "TrackingResponse":
        m = as_dict(d)
        return cls(
            tracking_number=text(m.get("trackingNumber")),
            mail_class=text(m.get("mailClass")),
            mail_type=text(m.get("mailType")),
            status=text(m.get("status")),
            status_category=text(m.get("statusCategory")),
            status_summary=text(m.get("statusSummary")),
            origin_city=text(m.get("originCity")),
            origin_state=text(m.get("originState")),
            origin_zip=text(m.get("originZIP")),
            origin_country=text(m.get("originCountry")),
            destination_city=text(m.get("destinationCity")),
            destination_state=text(m.get("destinationState")),
            destination_zip=text(m.get("destinationZIP")),
            destination_country_code=text(m.get("destinationCountryCode")),
            expected_delivery_timestamp=parse_optional_timestamp(m.get("expectedDeliveryTimestamp")),
            expected_delivery_type=text(m.get("expectedDeliveryType")),
            guaranteed_delivery_timestamp=parse_optional_timestamp(m.get("guaranteedDeliveryTimestamp")),
            predicted_delivery_timestamp=parse_optional_timestamp(m.get("predictedDeliveryTimestamp")),
            predicted_delivery_date=parse_optional_timestamp(m.get("predictedDeliveryDate")),
            predicted_delivery_window_start_time=text(m.get("predictedDeliveryWindowStartTime")),
            predicted_delivery_window_end_time=text(m.get("predictedDeliveryWindowEndTime")),
            on_time=bool_string(m.get("onTime")),
            services=tuple(text(s) for s in as_list(m.get("services"))),
            tracking_events=tuple(TrackingEvent.from_dict(e) for e in as_list(m.get("trackingEvents"))),
        )

    def projected_deliveries(self) -> list[datetime]:
        return [
            ts for ts in (
                self.expected_delivery_timestamp,
                self.predicted_delivery_timestamp,
                self.predicted_delivery_date,
                self.guaranteed_delivery_timestamp,
            )
            if ts is not None
        ]

    def destination(self) -> str:
        return format_location(
            self.destination_city, self.destination_state, self.destination_zip, self.destination_country_code)


@dataclass(frozen=True)
class TokenResponse:
    access_token: str
    expires_in: int
    status: str = ""
    scope: str = ""
    token_type: str = ""
    issued_at: int = 0

    @classmethod
    def from_dict(cls, d: object) -> "TokenResponse":
        m = as_dict(d)
        return cls(
            access_token=text(m.get("access_token")),
            expires_in=int(text(m.get("expires_in")) or 0),
            status=text(m.get("status")),
            scope=text(m.get("scope")),
            token_type=text(m.get("token_type")),
            issued_at=int(text(m.get("issued_at")) or 0),
        )

    def is_approved(self) -> bool:
        return self.status.lower() == TOKEN_STATUS_APPROVED

    def grants_tracking(self) -> bool:
        # scope is space-separated; an omitted scope is taken as granted
        return not self.scope or TRACKING_SCOPE in self.scope.split()


def token_request(consumer_key: str, consumer_secret: str) -> dict[str, str]:
    return {
        "grant_type": "client_credentials",
        "client_id": consumer_key,
        "client_secret": consumer_secret,
        "scope": TRACKING_SCOPE,
    }


def error_message(body: Mapping[str, Any]) -> str:
    """USPS errors: {"error": {"code", "message", "errors": [{"title", "detail"}]}}."""
    err = as_dict(as_dict(body).get("error"))
    if not err:
        return ""
    parts = [text(err.get("message")) or text(err.get("code"))]
    for e in as_list(err.get("errors")):
        m = as_dict(e)
        detail = text(m.get("detail")) or text(m.get("title"))
        if detail:
            parts.append(detail)
    return "; ".join(p for p in parts if p)
