# src/parcel_tracker/config/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import dotenv_values, find_dotenv, load_dotenv

from parcel_tracker.models import Carrier, EnvCfg


class EnvError(RuntimeError):
    """Raised when no carrier credentials are configured."""


# key/secret pairs; strict mode needs at least one complete pair
CREDENTIAL_KEYS: Dict[Carrier, Tuple[str, str]] = {
    Carrier.FEDEX: ("FEDEX_API_KEY", "FEDEX_API_SECRET"),
    Carrier.UPS: ("UPS_CLIENT_ID", "UPS_CLIENT_SECRET"),
    Carrier.USPS: ("USPS_CONSUMER_KEY", "USPS_CONSUMER_SECRET"),
}

OPTIONAL_KEYS: Tuple[str, ...] = (
    "FEDEX_BASE_URL",
    "UPS_BASE_URL",
    "USPS_BASE_URL",
    "PARCEL_TRACKER_STORE",
)


def find_project_dotenv(start: Optional[Path] = None) -> Optional[Path]:
    """Nearest `.env` at or above `start`; python-dotenv's CWD search when `start` is None."""
    if start is None:
        found = find_dotenv(filename=".env", usecwd=True)
        return Path(found) if found else None
    start = Path(start).resolve()
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def load_env(dotenv_path: Optional[Path] = None, *, override: bool = False) -> Dict[str, str]:
    """
    Load a .env file into os.environ and return the pairs it defines.

    Without `dotenv_path` the nearest project .env is used. A missing file
    loads nothing and returns {}.
    """
    path = Path(dotenv_path) if dotenv_path else find_project_dotenv()
    if path is None or not path.is_file():
        return {}
    load_dotenv(dotenv_path=path, override=override)
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


def configured_carriers_in_env() -> list[Carrier]:
    return [c for c, (k, s) in CREDENTIAL_KEYS.items() if os.getenv(k) and os.getenv(s)]


def get_app_env(dotenv_path: Path | str | None = ".env", *, strict: bool = True) -> EnvCfg:
    """
    Read carrier credentials and endpoint overrides into an EnvCfg.

    `dotenv_path=None` skips file loading. Process env wins over the file.
    In strict mode EnvError is raised unless some carrier has both key and secret.
    """
    if dotenv_path:
        load_env(Path(dotenv_path), override=False)

    if strict and not configured_carriers_in_env():
        pairs = ", ".join(f"{k}/{s}" for k, s in CREDENTIAL_KEYS.values())
        raise EnvError(f"No carrier credentials configured; set at least one of: {pairs}")

    keys = [k for pair in CREDENTIAL_KEYS.values() for k in pair] + list(OPTIONAL_KEYS)
    return EnvCfg(**{k: os.getenv(k, "") for k in keys})


__all__ = [
    "CREDENTIAL_KEYS",
    "EnvError",
    "OPTIONAL_KEYS",
    "configured_carriers_in_env",
    "find_project_dotenv",
    "get_app_env",
    "load_env",
]
