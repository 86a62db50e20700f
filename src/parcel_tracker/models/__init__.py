from .carrier import Carrier, tracking_url
from .env_cfg import EnvCfg
from .parcel import Parcel, ParcelData, ParcelEvent, ParcelEventType, latest_event, utc_sort_key

__all__ = [
    "Carrier",
    "EnvCfg",
    "Parcel",
    "ParcelData",
    "ParcelEvent",
    "ParcelEventType",
    "latest_event",
    "tracking_url",
    "utc_sort_key",
]
