from __future__ import annotations
from dataclasses import dataclass

from .carrier import Carrier


@dataclass(frozen=True)
class EnvCfg:
    """Credentials and endpoint overrides read by get_app_env()."""
    FEDEX_API_KEY: str = ""
    FEDEX_API_SECRET: str = ""
    UPS_CLIENT_ID: str = ""
    UPS_CLIENT_SECRET: str = ""
    USPS_CONSUMER_KEY: str = ""
    USPS_CONSUMER_SECRET: str = ""
    FEDEX_BASE_URL: str = ""
    UPS_BASE_URL: str = ""
    USPS_BASE_URL: str = ""
    PARCEL_TRACKER_STORE: str = ""

    def credentials_for(self, carrier: Carrier) -> tuple[str, str]:
        if carrier is Carrier.FEDEX:
            return self.FEDEX_API_KEY, self.FEDEX_API_SECRET
        if carrier is Carrier.UPS:
            return self.UPS_CLIENT_ID, self.UPS_CLIENT_SECRET
        if carrier is Carrier.USPS:
            return self.USPS_CONSUMER_KEY, self.USPS_CONSUMER_SECRET
        return "", ""

    def configured_carriers(self) -> list[Carrier]:
        """Carriers with a complete key/secret pair, in a stable order."""
        return [
            c for c in (Carrier.FEDEX, Carrier.UPS, Carrier.USPS)
            if all(self.credentials_for(c))
        ]
