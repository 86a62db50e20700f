# tests/config/test_env.py

import os
from pathlib import Path

import pytest

from parcel_tracker.config.env import (
    EnvError,
    configured_carriers_in_env,
    find_project_dotenv,
    get_app_env,
    load_env,
)
from parcel_tracker.models import Carrier


def _write_env_file(dirpath, text=""):
    f = dirpath / ".env"
    f.write_text(text)
    return f


def test_load_env_reads_file_and_sets_process_env_when_missing(tmp_path, isolated_env):
    f = _write_env_file(tmp_path, "UPS_CLIENT_ID=file_id\nUPS_CLIENT_SECRET=file_secret\n")

    loaded = load_env(f, override=False)

    assert loaded == {"UPS_CLIENT_ID": "file_id", "UPS_CLIENT_SECRET": "file_secret"}
    assert os.environ["UPS_CLIENT_ID"] == "file_id"
    assert os.environ["UPS_CLIENT_SECRET"] == "file_secret"


def test_missing_file_loads_nothing(tmp_path, isolated_env):
    assert load_env(tmp_path / "nope.env") == {}
    assert "UPS_CLIENT_ID" not in os.environ


def test_process_env_wins_over_dotenv(tmp_path, isolated_env):
    f = _write_env_file(tmp_path, "FEDEX_API_KEY=file_key\nFEDEX_API_SECRET=file_secret\n")
    os.environ["FEDEX_API_KEY"] = "env_key"

    cfg = get_app_env(f)

    assert cfg.FEDEX_API_KEY == "env_key"
    assert cfg.FEDEX_API_SECRET == "file_secret"
    assert cfg.configured_carriers() == [Carrier.FEDEX]


def test_load_env_override_true_file_wins(tmp_path, isolated_env):
    os.environ["USPS_CONSUMER_KEY"] = "env_key"
    f = _write_env_file(tmp_path, "USPS_CONSUMER_KEY=file_key\n")

    load_env(f, override=True)

    assert os.environ["USPS_CONSUMER_KEY"] == "file_key"


def test_strict_requires_one_complete_pair(tmp_path, isolated_env):
    # a key without its secret does not count
    f = _write_env_file(tmp_path, "UPS_CLIENT_ID=only_the_id\n")

    with pytest.raises(EnvError) as e:
        get_app_env(dotenv_path=f, strict=True)
    assert "UPS_CLIENT_ID/UPS_CLIENT_SECRET" in str(e.value)

    cfg = get_app_env(dotenv_path=None, strict=False)
    assert cfg.UPS_CLIENT_ID == "only_the_id"
    assert cfg.configured_carriers() == []


def test_optional_keys_are_read(tmp_path, isolated_env):
    f = _write_env_file(
        tmp_path,
        "USPS_CONSUMER_KEY=k\nUSPS_CONSUMER_SECRET=s\n"
        "USPS_BASE_URL=https://apis-tem.usps.com\nPARCEL_TRACKER_STORE=/tmp/parcels.json\n",
    )
    cfg = get_app_env(f)

    assert cfg.USPS_BASE_URL == "https://apis-tem.usps.com"
    assert cfg.PARCEL_TRACKER_STORE == "/tmp/parcels.json"
    assert cfg.credentials_for(Carrier.USPS) == ("k", "s")
    assert cfg.credentials_for(Carrier.DHL) == ("", "")
    assert configured_carriers_in_env() == [Carrier.USPS]


def test_project_dotenv_is_found_upwards(tmp_path: Path, isolated_env):
    expected = _write_env_file(tmp_path, "UPS_CLIENT_ID=up\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_project_dotenv(start=nested) == expected.resolve()


def test_load_env_without_path_uses_nearest_dotenv(tmp_path: Path, isolated_env, monkeypatch):
    _write_env_file(tmp_path, "UPS_CLIENT_ID=up\n")
    nested = tmp_path / "a"
    nested.mkdir()
    monkeypatch.chdir(nested)

    assert load_env() == {"UPS_CLIENT_ID": "up"}
    assert os.environ["UPS_CLIENT_ID"] == "up"
