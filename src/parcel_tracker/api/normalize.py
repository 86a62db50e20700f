# src/parcel_tracker/api/normalize.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from parcel_tracker.models import Carrier, ParcelData, ParcelEvent, utc_sort_key
from parcel_tracker.rules.event_types import (
    FEDEX_DELIVERED_CODES,
    FEDEX_EVENT_TYPES,
    UPS_DELIVERED_CODES,
    UPS_DELIVERED_TYPES,
    UPS_EVENT_TYPES,
    UPS_STATUS_CODE_TYPES,
    UPS_STATUS_TYPE_TYPES,
    USPS_DELIVERED_CODES,
    USPS_EVENT_TYPES,
    any_delivered,
    first_mapped,
    lookup,
)
from parcel_tracker.schemas import fedex, ups, usps

logger = logging.getLogger("parcel_tracker.api.normalize")


def _latest(timestamps: Iterable[Optional[datetime]]) -> Optional[datetime]:
    candidates = [ts for ts in timestamps if ts is not None]
    if not candidates:
        return None
    return max(candidates, key=utc_sort_key)


def normalize_fedex(result: Union[fedex.TrackResult, Mapping[str, Any]]) -> ParcelData:
    """
    Reduce one FedEx trackResults[] entry to ParcelData.

    - Event type comes from scanEvents[].eventType, falling back to derivedStatusCode.
    - delivered: some kept scan carries a delivered code (DL).
    - Projection: latest ESTIMATED_DELIVERY / COMMITMENT / APPOINTMENT_DELIVERY
      entry of dateAndTimes; ACTUAL_DELIVERY is never a projection.
    """
    if not isinstance(result, fedex.TrackResult):
        result = fedex.TrackResult.from_dict(result)

    events: list[ParcelEvent] = []
    delivered = False
    for scan in result.scan_events:
        if scan.date is None:
            logger.debug("FedEx %s: skipping scan without date (%s)",
                         result.tracking_number, scan.event_type)
            continue
        etype = first_mapped(
            (FEDEX_EVENT_TYPES, scan.event_type),
            (FEDEX_EVENT_TYPES, scan.derived_status_code),
        )
        events.append(ParcelEvent(
            type=etype,
            description=scan.event_description or etype.value,
            location=scan.scan_location.location(),
            timestamp=scan.date,
            code=scan.event_type or scan.derived_status_code,
        ))
        delivered = delivered or any_delivered((scan.event_type, scan.derived_status_code), FEDEX_DELIVERED_CODES)

    projection = _latest(
        dt.date_time for dt in result.date_and_times
        if dt.type in fedex.SCHEDULED_DELIVERY_DATE_TYPES
    )

    return ParcelData(events=events, delivered=delivered, delivery_projection=projection)


def _ups_delivered(status: ups.Status) -> bool:
    return (
        any_delivered((status.type,), UPS_DELIVERED_TYPES)
        or any_delivered((status.code, status.status_code), UPS_DELIVERED_CODES)
    )


def normalize_ups(package: Union[ups.Package, Mapping[str, Any]]) -> ParcelData:
    """
    Reduce one UPS trackResponse.shipment[].package[] entry to ParcelData.

    Activity timestamps are date (YYYYMMDD) + time (HHMMSS); a bare date is accepted
    and activities without a date are skipped.
    Projection uses SDD/RDD deliveryDate entries only.
    """
    if not isinstance(package, ups.Package):
        package = ups.Package.from_dict(package)

    events: list[ParcelEvent] = []
    delivered = False
    for activity in package.activity:
        status = activity.status
        if not activity.date:
            logger.debug("UPS %s: skipping activity without date (%s)",
                         package.tracking_number, status.code or status.status_code)
            continue
        etype = first_mapped(
            (UPS_EVENT_TYPES, status.code),
            (UPS_STATUS_CODE_TYPES, status.status_code),
            (UPS_STATUS_TYPE_TYPES, status.type),
        )
        events.append(ParcelEvent(
            type=etype,
            description=status.description or status.simplified_text_description or etype.value,
            location=activity.location.location(),
            timestamp=activity.timestamp(),
            code=status.code or status.status_code,
        ))
        delivered = delivered or _ups_delivered(status)

    projection = _latest(
        ups.parse_compact(dd.date) for dd in package.delivery_date
        if dd.type in ups.PROJECTED_DELIVERY_DATE_TYPES and dd.date
    )

    return ParcelData(events=events, delivered=delivered, delivery_projection=projection)


def normalize_usps(response: Union[usps.TrackingResponse, Mapping[str, Any]]) -> ParcelData:
    """Reduce a USPS tracking response to ParcelData."""
    if not isinstance(response, usps.TrackingResponse):
        response = usps.TrackingResponse.from_dict(response)

    events: list[ParcelEvent] = []
    for ev in response.tracking_events:
        ts = ev.event_timestamp or ev.gmt_timestamp
        if ts is None:
            logger.debug("USPS %s: skipping event without timestamp (%s)",
                         response.tracking_number, ev.event_code)
            continue
        etype = lookup(USPS_EVENT_TYPES, ev.event_code)
        events.append(ParcelEvent(
            type=etype,
            # USPS puts the human-readable text in eventType
            description=ev.event_type or etype.value,
            location=ev.location(),
            timestamp=ts,
            code=ev.event_code,
        ))

    return ParcelData(
        events=events,
        delivered=any_delivered((e.code for e in events), USPS_DELIVERED_CODES),
        delivery_projection=_latest(response.projected_deliveries()),
    )


NORMALIZERS: dict[Carrier, Callable[[Any], ParcelData]] = {
    Carrier.FEDEX: normalize_fedex,
    Carrier.UPS: normalize_ups,
    Carrier.USPS: normalize_usps,
}
