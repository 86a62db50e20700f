from .export import export_parcels, parcels_to_frame
from .render import format_event_history, format_event_oneline
from .store import DEFAULT_STORE_PATH, JsonParcelStore, ParcelStore

__all__ = [
    "DEFAULT_STORE_PATH",
    "JsonParcelStore",
    "ParcelStore",
    "export_parcels",
    "format_event_history",
    "format_event_oneline",
    "parcels_to_frame",
]
