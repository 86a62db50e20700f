from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Optional
from urllib.parse import quote

from parcel_tracker.models import Carrier, Parcel, ParcelData
from parcel_tracker.schemas import usps

from .base import AccessToken, OAuthCarrierClient
from .errors import AuthenticationError, CarrierResponseError
from .normalize import normalize_usps

USPS_BASE_URL = "https://apis.usps.com"
TOKEN_PATH = "/oauth2/v3/token"
TRACK_PATH = "/tracking/v3/tracking/"
DEFAULT_MAX_WORKERS = 4


def parse_response(tracking_number: str, body: Mapping[str, Any]) -> ParcelData:
    message = usps.error_message(body)
    if message:
        raise CarrierResponseError(message, tracking_number=tracking_number)
    return normalize_usps(usps.TrackingResponse.from_dict(body))


class USPSClient(OAuthCarrierClient):
    """USPS Tracking v3 client. One GET per number, fanned out on a small thread pool."""

    carrier = Carrier.USPS
    default_base_url = USPS_BASE_URL

    def __init__(self, client_id: str, client_secret: str, *, max_workers: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(client_id, client_secret, **kwargs)
        self.max_workers = max_workers or DEFAULT_MAX_WORKERS

    def _fetch_token(self) -> AccessToken:
        body = self.request_token(
            self.url(TOKEN_PATH),
            headers={"Content-Type": "application/json"},
            json=usps.token_request(self.client_id, self.client_secret),
        )
        try:
            token = usps.TokenResponse.from_dict(body)
        except ValueError as ex:
            raise AuthenticationError(f"USPS token response is malformed: {ex}") from ex
        if not token.is_approved():
            raise AuthenticationError(f"USPS token status is not approved: {token.status or '<missing>'}")
        if not token.grants_tracking():
            raise AuthenticationError(f"USPS token scope does not include tracking: {token.scope}")
        return self.token_expiring_in(token.access_token, token.expires_in)

    def track(self, tracking_numbers: list[str]) -> list[Parcel]:
        if not tracking_numbers:
            return []
        token = self.authenticate()
        workers = max(1, min(self.max_workers, len(tracking_numbers)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="usps") as pool:
            return list(pool.map(lambda tn: self._track_one(tn, token), tracking_numbers))

    def _track_one(self, tracking_number: str, token: str) -> Parcel:
        url = self.url(TRACK_PATH + quote(tracking_number, safe=""))
        try:
            resp = self.send("GET", url, tracking_number=tracking_number,
                             headers=self.bearer_headers(token), params={"expand": "DETAIL"})
            body = self.decode(resp, tracking_number=tracking_number, error_message=usps.error_message)
            return self.parcel(tracking_number, parse_response(tracking_number, body))
        except (CarrierResponseError, ValueError) as ex:
            self.logger.info("USPS %s: %s", tracking_number, ex)
            return self.failed(tracking_number, ex)
