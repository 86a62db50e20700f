# src/parcel_tracker/io/render.py
from __future__ import annotations

from parcel_tracker.models import Parcel, ParcelEvent, ParcelEventType

EVENT_TIME_FORMAT = "%a, %b %d %Y %H:%M"

ICON_DELIVERED = "✓"
ICON_EVENT = "•"
ICON_ERROR = "✗"


def _event_text(event: ParcelEvent) -> str:
    out = event.description
    if event.location:
        out = f"{out} @ {event.location}"
    return out


def _icon(event: ParcelEvent) -> str:
    return ICON_DELIVERED if event.type is ParcelEventType.DELIVERED else ICON_EVENT


def format_event_oneline(tracking_number: str, event: ParcelEvent) -> str:
    """'Tue, Feb 25 2025 11:48 <tn> <description> @ <location>' in the event's own local time."""
    return f"{event.timestamp.strftime(EVENT_TIME_FORMAT)} {tracking_number} {_event_text(event)}"


def format_event_history(parcel: Parcel) -> str:
    """Header line plus a tree of events, oldest first.

    The header status is the latest event's type; error parcels show the
    error message instead.
    """
    if parcel.has_error() and not parcel.has_data():
        return f"{ICON_ERROR} {parcel.name} ({parcel.carrier}) ERROR: {parcel.error}\n"

    events = sorted(parcel.data.events, key=ParcelEvent.sort_key) if parcel.data else []
    last = events[-1] if events else None
    if last is None:
        return f"{ICON_EVENT} {parcel.name} ({parcel.carrier}) NO EVENTS\n"

    lines = [f"{_icon(last)} {parcel.name} ({parcel.carrier}) {last.type.value}"]
    for i, event in enumerate(events):
        if i == 0:
            branch = "└─┬─" if len(events) > 1 else "└───"
        elif i == len(events) - 1:
            branch = "  └─"
        else:
            branch = "  ├─"
        lines.append(f"{branch} {_icon(event)} {event.timestamp.strftime(EVENT_TIME_FORMAT)} {_event_text(event)}")
    if parcel.has_error():
        lines.append(f"  {ICON_ERROR} last refresh failed: {parcel.error}")
    return "\n".join(lines) + "\n"
