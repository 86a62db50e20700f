import json
import os
import threading
from types import SimpleNamespace

import pytest

CARRIER_ENV_KEYS = (
    "FEDEX_API_KEY",
    "FEDEX_API_SECRET",
    "UPS_CLIENT_ID",
    "UPS_CLIENT_SECRET",
    "USPS_CONSUMER_KEY",
    "USPS_CONSUMER_SECRET",
    "FEDEX_BASE_URL",
    "UPS_BASE_URL",
    "USPS_BASE_URL",
    "PARCEL_TRACKER_STORE",
    "LOG_LEVEL",
)


@pytest.fixture
def isolated_env():
    """Strip carrier keys from os.environ and restore everything afterwards.

    python-dotenv writes straight into os.environ, which monkeypatch does not track.
    """
    saved = dict(os.environ)
    for k in CARRIER_ENV_KEYS:
        os.environ.pop(k, None)
    yield
    os.environ.clear()
    os.environ.update(saved)


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text

    def json(self):
        if self._body is None:
            return json.loads(self.text)  # raises ValueError for non-JSON text
        return self._body


class FakeTransport:
    """Scripted stand-in for RequestsTransport.

    `handler(method, url, kwargs)` returns a FakeResponse or raises.
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self._lock = threading.Lock()

    def _call(self, method, url, kwargs):
        with self._lock:
            self.calls.append((method, url, kwargs))
        return self.handler(method, url, kwargs)

    def post(self, url, **kwargs):
        return self._call("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._call("GET", url, kwargs)

    def calls_to(self, fragment):
        return [c for c in self.calls if fragment in c[1]]


@pytest.fixture
def fake_http():
    return SimpleNamespace(Response=FakeResponse, Transport=FakeTransport)


# -------- sample carrier bodies --------

def fedex_track_result(tn, *, scans=None, dates=None, error=None):
    result = {"trackingNumberInfo": {"trackingNumber": tn, "carrierCode": "FDXE"}}
    if error is not None:
        result["error"] = error
        return result
    result["latestStatusDetail"] = {"code": "IT", "derivedCode": "IT", "statusByLocale": "In transit"}
    result["scanEvents"] = scans if scans is not None else [
        {
            "date": "2025-02-25T11:48:00-08:00",
            "eventType": "OC",
            "eventDescription": "Shipment information sent to FedEx",
            "derivedStatusCode": "IN",
            "scanLocation": {"city": "Altoona", "stateOrProvinceCode": "PA", "postalCode": "16601",
                             "countryCode": "US"},
        },
        {
            "date": "2025-02-26T14:24:00-08:00",
            "eventType": "DL",
            "eventDescription": "Delivered",
            "derivedStatusCode": "DL",
            "scanLocation": {"city": "Los Angeles", "stateOrProvinceCode": "CA", "postalCode": "90001",
                             "countryCode": "US"},
        },
    ]
    result["dateAndTimes"] = dates if dates is not None else [
        {"type": "ACTUAL_DELIVERY", "dateTime": "2025-02-26T14:24:00-08:00"},
        {"type": "ESTIMATED_DELIVERY", "dateTime": "2025-02-27T00:00:00-08:00"},
    ]
    return result


def fedex_body(*results):
    return {
        "transactionId": "t-1",
        "output": {
            "completeTrackResults": [
                {"trackingNumber": r["trackingNumberInfo"]["trackingNumber"], "trackResults": [r]}
                for r in results
            ]
        },
    }


def ups_package(tn, *, activity=None, delivery_date=None):
    return {
        "trackingNumber": tn,
        "activity": activity if activity is not None else [
            {
                "location": {"address": {"city": "Louisville", "stateProvince": "KY", "postalCode": "40213",
                                         "countryCode": "US"}},
                "status": {"type": "I", "description": "Departed from Facility", "code": "DP", "statusCode": "005"},
                "date": "20250224",
                "time": "031500",
            },
            {
                "location": {"address": {"city": "Los Angeles", "stateProvince": "CA", "postalCode": "90001",
                                         "countryCode": "US"}},
                "status": {"type": "I", "description": "Out For Delivery Today", "code": "OT", "statusCode": "021"},
                "date": "20250225",
                "time": "080100",
            },
        ],
        "deliveryDate": delivery_date if delivery_date is not None else [{"type": "SDD", "date": "20250226"}],
        "currentStatus": {"code": "021", "description": "Out For Delivery Today"},
    }


def ups_body(*packages):
    return {"trackResponse": {"shipment": [{"inquiryNumber": p["trackingNumber"], "package": [p]}
                                           for p in packages]}}


def usps_body(tn, *, events=None, **extra):
    body = {
        "trackingNumber": tn,
        "statusCategory": "In Transit",
        "expectedDeliveryTimestamp": "2025-03-01T20:00:00-05:00",
        "trackingEvents": events if events is not None else [
            {
                "eventType": "Arrived at USPS Regional Facility",
                "eventTimestamp": "2025-02-27T06:10:00",
                "eventCity": "NEW YORK",
                "eventState": "NY",
                "eventZIP": "10199",
                "eventCountry": "",
                "eventCode": "10",
            },
            {
                "eventType": "Shipping Label Created, USPS Awaiting Item",
                "eventTimestamp": "2025-02-26T18:02:00-05:00",
                "eventCity": "BROOKLYN",
                "eventState": "NY",
                "eventZIP": "11201",
                "eventCode": "GX",
            },
        ],
    }
    body.update(extra)
    return body


@pytest.fixture
def payloads():
    return SimpleNamespace(
        fedex_track_result=fedex_track_result,
        fedex_body=fedex_body,
        ups_package=ups_package,
        ups_body=ups_body,
        usps_body=usps_body,
    )
