from .base import CarrierClient, OAuthCarrierClient
from .errors import AuthenticationError, CarrierResponseError, TrackingError
from .fedex import FedExClient
from .normalize import NORMALIZERS, normalize_fedex, normalize_ups, normalize_usps
from .replay import ReplayClient
from .transport import RequestsTransport
from .ups import UPSClient
from .usps import USPSClient

__all__ = [
    "AuthenticationError",
    "CarrierClient",
    "CarrierResponseError",
    "FedExClient",
    "NORMALIZERS",
    "OAuthCarrierClient",
    "ReplayClient",
    "RequestsTransport",
    "TrackingError",
    "UPSClient",
    "USPSClient",
    "normalize_fedex",
    "normalize_ups",
    "normalize_usps",
]
