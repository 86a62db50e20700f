from __future__ import annotations

import uuid
from typing import Any, Mapping
from urllib.parse import quote

from requests.auth import HTTPBasicAuth

from parcel_tracker.models import Carrier, Parcel, ParcelData
from parcel_tracker.rules.classifier import normalize_tracking_number
from parcel_tracker.schemas import ups

from .base import AccessToken, OAuthCarrierClient
from .errors import AuthenticationError, CarrierResponseError
from .normalize import normalize_ups

UPS_BASE_URL = "https://onlinetools.ups.com"
TOKEN_PATH = "/security/v1/oauth/token"
TRACK_PATH = "/api/track/v1/details/"
TRANSACTION_SRC = "parcel-tracker"


def parse_response(tracking_number: str, body: Mapping[str, Any]) -> ParcelData:
    """Pick this number's package out of a UPS response and normalize it."""
    response = ups.TrackingResponse.from_dict(body)
    packages = response.packages()
    for package in packages:
        if normalize_tracking_number(package.tracking_number) == tracking_number:
            return normalize_ups(package)
    if len(packages) == 1:
        return normalize_ups(packages[0])

    warnings = ups.shipment_warnings(response)
    message = "; ".join(warnings) if warnings else "no package in UPS response"
    raise CarrierResponseError(message, tracking_number=tracking_number)


class UPSClient(OAuthCarrierClient):
    """UPS Tracking API client. One GET per number, issued sequentially."""

    carrier = Carrier.UPS
    default_base_url = UPS_BASE_URL

    def _fetch_token(self) -> AccessToken:
        body = self.request_token(
            self.url(TOKEN_PATH),
            headers={"Content-Type": "application/x-www-form-urlencoded", "x-merchant-id": self.client_id},
            data={"grant_type": "client_credentials"},
            auth=HTTPBasicAuth(self.client_id, self.client_secret),
        )
        try:
            token = ups.TokenResponse.from_dict(body)
        except ValueError as ex:
            raise AuthenticationError(f"UPS token response is malformed: {ex}") from ex
        return self.token_expiring_in(token.access_token, token.expires_in)

    def track(self, tracking_numbers: list[str]) -> list[Parcel]:
        if not tracking_numbers:
            return []
        token = self.authenticate()
        return [self._track_one(tn, token) for tn in tracking_numbers]

    def _track_one(self, tracking_number: str, token: str) -> Parcel:
        headers = {
            **self.bearer_headers(token),
            # transId: unique per request, at most 32 characters
            "transId": uuid.uuid4().hex,
            "transactionSrc": TRANSACTION_SRC,
        }
        url = self.url(TRACK_PATH + quote(tracking_number, safe=""))
        try:
            resp = self.send("GET", url, tracking_number=tracking_number, headers=headers, params=ups.DEFAULT_QUERY)
            body = self.decode(resp, tracking_number=tracking_number, error_message=ups.error_message)
            return self.parcel(tracking_number, parse_response(tracking_number, body))
        except (CarrierResponseError, ValueError) as ex:
            self.logger.info("UPS %s: %s", tracking_number, ex)
            return self.failed(tracking_number, ex)
