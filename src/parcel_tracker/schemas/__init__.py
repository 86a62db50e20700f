# src/parcel_tracker/schemas/__init__.py
from .common import format_location, parse_optional_timestamp, parse_timestamp

__all__ = ["format_location", "parse_optional_timestamp", "parse_timestamp"]
