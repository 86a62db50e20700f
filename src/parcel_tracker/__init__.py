# src/parcel_tracker/__init__.py
from .models import Carrier, Parcel, ParcelData, ParcelEvent, ParcelEventType
from .pipelines.orchestrator import TrackingOrchestrator
from .rules.classifier import classify, normalize_tracking_number

__all__ = [
    "Carrier",
    "Parcel",
    "ParcelData",
    "ParcelEvent",
    "ParcelEventType",
    "TrackingOrchestrator",
    "classify",
    "normalize_tracking_number",
]
