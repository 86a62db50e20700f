# src/parcel_tracker/api/base.py
from __future__ import annotations

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import requests

from parcel_tracker.models import Carrier, Parcel, ParcelData

from .errors import AuthenticationError, CarrierResponseError
from .transport import RequestsTransport

# Refresh a little before the carrier says the token expires.
TOKEN_EXPIRY_SKEW = 30.0
_LOG_BODY_LIMIT = 4000


def truncate(text: Optional[str], limit: int = _LOG_BODY_LIMIT) -> Optional[str]:
    if text and len(text) > limit:
        return text[:limit] + "..."
    return text


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float  # clock() seconds

    def is_valid(self, now: float, skew: float = TOKEN_EXPIRY_SKEW) -> bool:
        return bool(self.value) and now < self.expires_at - skew


class CarrierClient(ABC):
    """A client for one carrier's tracking API."""

    carrier: Carrier = Carrier.UNKNOWN

    @abstractmethod
    def authenticate(self) -> str:
        """Return a usable credential, fetching one if needed."""

    @abstractmethod
    def track(self, tracking_numbers: list[str]) -> list[Parcel]:
        """Track this carrier's numbers.

        Raises AuthenticationError when no credential can be obtained. Failures
        for single numbers are returned as error parcels instead of raised.
        """

    def parcel(self, tracking_number: str, data: ParcelData) -> Parcel:
        return Parcel(tracking_number=tracking_number, carrier=self.carrier, data=data)

    def failed(self, tracking_number: str, error: object) -> Parcel:
        return Parcel.failed(tracking_number, self.carrier, error)


class OAuthCarrierClient(CarrierClient):
    """Base for clients using an OAuth2 client-credentials bearer token.

    The token is fetched lazily and reused until it is about to expire. Refresh
    happens under a lock with a re-check, so concurrent callers trigger at most
    one token request.
    """

    default_base_url: str = ""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        base_url: Optional[str] = None,
        transport: Optional[RequestsTransport] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.transport = transport or RequestsTransport()
        self.logger: logging.Logger = logger or logging.getLogger(
            f"parcel_tracker.api.{self.carrier.name.lower()}"
        )
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._token_lock = threading.Lock()

    def url(self, path: str) -> str:
        return self.base_url + path

    def authenticate(self) -> str:
        token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token.value

        with self._token_lock:
            token = self._token
            if token is not None and token.is_valid(self._clock()):
                return token.value
            self.logger.debug("Requesting %s OAuth token", self.carrier)
            token = self._fetch_token()
            self._token = token
            self.logger.debug("%s token acquired (valid for %.0fs)",
                              self.carrier, token.expires_at - self._clock())
            return token.value

    def invalidate_token(self) -> None:
        with self._token_lock:
            self._token = None

    def token_expiring_in(self, access_token: str, expires_in: object) -> AccessToken:
        if not access_token:
            raise AuthenticationError(f"{self.carrier} token response has no access_token")
        try:
            seconds = float(expires_in)
        except (TypeError, ValueError) as ex:
            raise AuthenticationError(f"{self.carrier} token response has bad expires_in: {expires_in!r}") from ex
        return AccessToken(value=access_token, expires_at=self._clock() + seconds)

    @abstractmethod
    def _fetch_token(self) -> AccessToken:
        """Request a fresh token from the carrier. Raises AuthenticationError."""

    def request_token(self, url: str, **kwargs: Any) -> Mapping[str, Any]:
        """POST a token request and return its JSON body, or raise AuthenticationError."""
        try:
            resp = self.transport.post(url, **kwargs)
        except requests.RequestException as ex:
            self.logger.warning("%s token request failed: %s", self.carrier, ex)
            raise AuthenticationError(f"{self.carrier} token request failed: {ex}") from ex

        status = resp.status_code
        if not 200 <= status < 300:
            self.logger.warning(
                "%s token request returned error status=%s response_body=%s",
                self.carrier, status, truncate(resp.text),
            )
            raise AuthenticationError(f"{self.carrier} token request returned HTTP {status}")
        try:
            body = resp.json()
        except ValueError as ex:
            raise AuthenticationError(f"{self.carrier} token response is not JSON") from ex
        if not isinstance(body, Mapping):
            raise AuthenticationError(f"{self.carrier} token response is not a JSON object")
        return body

    def bearer_headers(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Accept": "application/json"}

    def send(self, method: str, url: str, *, tracking_number: str = "", **kwargs: Any) -> requests.Response:
        """Issue a tracking request; transport failures become CarrierResponseError."""
        if "json" in kwargs:
            self.logger.debug("%s %s %s request_body=%s", self.carrier, method, url,
                              truncate(json.dumps(kwargs["json"], ensure_ascii=False)))
        else:
            self.logger.debug("%s %s %s", self.carrier, method, url)
        try:
            if method == "POST":
                return self.transport.post(url, **kwargs)
            return self.transport.get(url, **kwargs)
        except requests.RequestException as ex:
            self.logger.warning("%s transport %s failed for %s: %s", self.carrier, method, url, ex)
            raise CarrierResponseError(f"request failed: {ex}", tracking_number=tracking_number) from ex

    def decode(
        self,
        resp: requests.Response,
        *,
        tracking_number: str = "",
        error_message: Callable[[Mapping[str, Any]], str] = lambda body: "",
    ) -> Mapping[str, Any]:
        """Check status and parse the JSON body, raising CarrierResponseError on failure."""
        status = resp.status_code
        text = resp.text
        self.logger.debug("%s status=%s response_body=%s", self.carrier, status, truncate(text))

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not 200 <= status < 300:
            if status == 401:
                self.invalidate_token()
            detail = error_message(body) if isinstance(body, Mapping) else ""
            self.logger.warning("%s returned error status=%s for %s: %s",
                                self.carrier, status, tracking_number or "batch", detail or truncate(text, 200))
            raise CarrierResponseError(
                f"HTTP {status}: {detail}" if detail else f"HTTP {status}",
                tracking_number=tracking_number,
                status=status,
            )
        if not isinstance(body, Mapping):
            raise CarrierResponseError("malformed JSON response", tracking_number=tracking_number, status=status)
        return body
