from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional

from parcel_tracker.models import Carrier, ParcelData, Parcel
from parcel_tracker.rules.classifier import normalize_tracking_number
from parcel_tracker.schemas import fedex
from parcel_tracker.schemas.common import as_dict, as_list

from .base import AccessToken, OAuthCarrierClient
from .errors import CarrierResponseError
from .normalize import normalize_fedex

FEDEX_BASE_URL = "https://apis.fedex.com"
TOKEN_PATH = "/oauth/token"
TRACK_PATH = "/track/v1/trackingnumbers"


def index_results(body: Mapping[str, Any]) -> dict[str, Mapping[str, Any]]:
    """Map tracking number -> first raw trackResults[] entry of a FedEx response."""
    out: dict[str, Mapping[str, Any]] = {}
    for ctr in as_list(as_dict(as_dict(body).get("output")).get("completeTrackResults")):
        ctr = as_dict(ctr)
        results = [as_dict(r) for r in as_list(ctr.get("trackResults"))]
        tn = normalize_tracking_number(ctr.get("trackingNumber"))
        if not tn and results:
            tn = normalize_tracking_number(as_dict(results[0].get("trackingNumberInfo")).get("trackingNumber"))
        if tn and results and tn not in out:
            out[tn] = results[0]
    return out


def parse_result(tracking_number: str, raw: Optional[Mapping[str, Any]]) -> ParcelData:
    """Normalize one raw trackResults[] entry, raising CarrierResponseError for carrier errors."""
    if raw is None:
        raise CarrierResponseError("no result in FedEx response", tracking_number=tracking_number)
    result = fedex.TrackResult.from_dict(raw)
    if result.error is not None:
        raise CarrierResponseError(str(result.error), tracking_number=tracking_number)
    return normalize_fedex(result)


def parse_response(tracking_number: str, body: Mapping[str, Any]) -> ParcelData:
    return parse_result(tracking_number, index_results(body).get(tracking_number))


def chunked(items: list[str], size: int) -> Iterator[list[str]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


class FedExClient(OAuthCarrierClient):
    """FedEx Track API client.

    - authenticate(): OAuth token using client_id/client_secret in the
      x-www-form-urlencoded body (no Basic auth header).
    - track(): one POST per chunk of at most 30 numbers. A failed chunk marks
      every number in it; a trackResults[].error marks only its own number.
    """

    carrier = Carrier.FEDEX
    default_base_url = FEDEX_BASE_URL
    chunk_size = fedex.MAX_TRACKING_NUMBERS_PER_REQUEST

    def _fetch_token(self) -> AccessToken:
        body = self.request_token(
            self.url(TOKEN_PATH),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
        )
        return self.token_expiring_in(str(body.get("access_token") or ""), body.get("expires_in", 3600))

    def track(self, tracking_numbers: list[str]) -> list[Parcel]:
        if not tracking_numbers:
            return []
        token = self.authenticate()

        parcels: list[Parcel] = []
        for chunk in chunked(list(tracking_numbers), self.chunk_size):
            parcels.extend(self._track_chunk(chunk, token))
        return parcels

    def _track_chunk(self, chunk: list[str], token: str) -> list[Parcel]:
        headers = {
            **self.bearer_headers(token),
            "Content-Type": "application/json",
            "x-locale": "en_US",
        }
        try:
            resp = self.send("POST", self.url(TRACK_PATH), headers=headers, json=fedex.tracking_request(chunk))
            body = self.decode(resp, error_message=fedex.error_message)
        except CarrierResponseError as ex:
            self.logger.warning("FedEx chunk of %d failed: %s", len(chunk), ex)
            return [self.failed(tn, ex) for tn in chunk]

        by_number = index_results(body)
        out: list[Parcel] = []
        for tn in chunk:
            try:
                out.append(self.parcel(tn, parse_result(tn, by_number.get(tn))))
            except (CarrierResponseError, ValueError) as ex:
                self.logger.info("FedEx %s: %s", tn, ex)
                out.append(self.failed(tn, ex))
        return out
