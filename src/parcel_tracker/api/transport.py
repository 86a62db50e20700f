from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

Timeout = Union[float, Tuple[float, float]]

DEFAULT_TIMEOUT: Tuple[float, float] = (5.0, 30.0)  # (connect, read) seconds

# one attempt per request; failures surface as error parcels instead
NO_RETRIES = Retry(total=0, read=False, raise_on_status=False)


class RequestsTransport:
    """Requests session wrapper with bounded timeouts.

    Every call carries a (connect, read) timeout so one carrier cannot hang a
    batch. The mounted adapter never retries.
    """

    def __init__(self, timeout: Timeout = DEFAULT_TIMEOUT, *, user_agent: str = "parcel-tracker") -> None:
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.timeout = timeout

        adapter = HTTPAdapter(max_retries=NO_RETRIES)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def post(self, url: str, *, headers: Optional[Dict[str, str]] = None, data: Any = None, json: Any = None,
             params: Optional[Dict[str, Any]] = None, auth: Any = None):
        return self.session.post(url, headers=headers, data=data, json=json, params=params, auth=auth,
                                 timeout=self.timeout)

    def get(self, url: str, *, headers: Optional[Dict[str, str]] = None, params: Optional[Dict[str, Any]] = None):
        return self.session.get(url, headers=headers, params=params, timeout=self.timeout)

    def close(self) -> None:
        self.session.close()
