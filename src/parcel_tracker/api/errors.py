# src/parcel_tracker/api/errors.py
from __future__ import annotations


class TrackingError(RuntimeError):
    """Base class for carrier tracking failures."""


class AuthenticationError(TrackingError):
    """Credential fetch failed; the whole batch for that carrier fails."""


class CarrierResponseError(TrackingError):
    """A single tracking number could not be fetched or understood."""

    def __init__(self, message: str, *, tracking_number: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.tracking_number = tracking_number
        self.status = status
