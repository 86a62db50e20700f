import json

import pandas as pd
import pytest

from parcel_tracker.cli import build_parser, main

FEDEX_TN = "441259201412"
UPS_TN = "1Z999AA10123456784"


@pytest.fixture
def replay_file(tmp_path, payloads):
    path = tmp_path / "replay.json"
    path.write_text(json.dumps({
        FEDEX_TN: {"carrier": "FedEx", "body": payloads.fedex_body(payloads.fedex_track_result(FEDEX_TN))},
        UPS_TN: {"carrier": "UPS", "body": payloads.ups_body(payloads.ups_package(UPS_TN))},
    }), encoding="utf-8")
    return path


@pytest.fixture
def run(tmp_path, isolated_env):
    store = tmp_path / "parcels.json"

    def _run(*argv):
        base = ["--no-console", "--env-file", str(tmp_path / "missing.env"), "--store", str(store)]
        return main([*base, *argv])

    _run.store = store
    return _run


def _stored(run):
    return json.loads(run.store.read_text(encoding="utf-8"))["parcels"]


def test_parser_splits_comma_separated_carrier_flags():
    args = build_parser().parse_args(["track", "--ups", "A1,B2", "--ups", "C3", "--fedex", " D4 , "])
    assert args.ups == ["A1", "B2", "C3"]
    assert args.fedex == ["D4"]
    assert args.usps == []


def test_track_prints_history_and_saves(run, replay_file, capsys):
    rc = run("--replay", str(replay_file), "track", FEDEX_TN, UPS_TN.lower())
    out = capsys.readouterr().out

    assert rc == 0
    assert f"✓ {FEDEX_TN} (FedEx) DELIVERED\n" in out
    assert f"• {UPS_TN} (UPS) OUT FOR DELIVERY\n" in out
    assert out.index(FEDEX_TN) < out.index(UPS_TN)
    assert set(_stored(run)) == {FEDEX_TN, UPS_TN}


def test_track_with_name_and_no_save(run, replay_file, capsys):
    assert run("--replay", str(replay_file), "track", FEDEX_TN, "--name", "Shoes") == 0
    assert _stored(run)[FEDEX_TN]["name"] == "Shoes"

    assert run("--replay", str(replay_file), "track", UPS_TN, "--no-save") == 0
    assert UPS_TN not in _stored(run)
    assert f"{UPS_TN} (UPS)" in capsys.readouterr().out


def test_track_usage_errors(run, replay_file, capsys):
    missing = replay_file.with_name("nope.json")

    assert run("--replay", str(replay_file), "track") == 2
    assert run("--replay", str(replay_file), "track", FEDEX_TN, UPS_TN, "--name", "Both") == 2
    assert run("--replay", str(missing), "track", FEDEX_TN) == 2
    err = capsys.readouterr().err
    assert "no tracking numbers given" in err
    assert "--name needs exactly one tracking number" in err
    assert "Replay file does not exist" in err


def test_blank_number_is_a_usage_error(run, replay_file, capsys):
    assert run("--replay", str(replay_file), "track", FEDEX_TN, "  ") == 2
    assert "empty tracking number" in capsys.readouterr().err
    assert not run.store.exists()


def test_unknown_and_unreplayed_numbers_are_reported(run, replay_file, capsys):
    assert run("--replay", str(replay_file), "track", "hello", "TBA123456789012") == 0
    out = capsys.readouterr().out
    assert "✗ HELLO (Unknown) ERROR: unrecognized tracking number" in out
    assert "✗ TBA123456789012 (Amazon) ERROR: carrier Amazon is not supported" in out


def test_strict_env_without_credentials_exits_2(run, capsys):
    assert run("--strict-env", "list") == 2
    assert "No carrier credentials configured" in capsys.readouterr().err


def test_default_env_file_is_the_nearest_dotenv(tmp_path, isolated_env, monkeypatch, capsys):
    (tmp_path / ".env").write_text("UPS_CLIENT_ID=id\nUPS_CLIENT_SECRET=secret\n")
    nested = tmp_path / "work"
    nested.mkdir()
    monkeypatch.chdir(nested)

    assert main(["--no-console", "--strict-env", "--store", str(tmp_path / "p.json"), "list"]) == 0
    assert "No parcels stored." in capsys.readouterr().out


def test_list_and_export(run, replay_file, tmp_path, capsys):
    assert run("list") == 0
    assert "No parcels stored." in capsys.readouterr().out

    run("--replay", str(replay_file), "track", FEDEX_TN)
    capsys.readouterr()

    out_csv = tmp_path / "exports" / "parcels.csv"
    assert run("list", "--export", str(out_csv)) == 0
    assert FEDEX_TN in capsys.readouterr().out
    df = pd.read_csv(out_csv, dtype=str)
    assert df["Tracking Number"].tolist() == [FEDEX_TN]

    assert run("list", "--export", str(tmp_path / "parcels.txt")) == 2


def test_sync_retracks_stored_parcels(run, replay_file, capsys):
    assert run("--replay", str(replay_file), "sync") == 0
    assert "No parcels stored." in capsys.readouterr().out

    run("--replay", str(replay_file), "track", FEDEX_TN, "--name", "Shoes")
    capsys.readouterr()

    assert run("--replay", str(replay_file), "sync") == 0
    assert "✓ Shoes (FedEx) DELIVERED" in capsys.readouterr().out


def test_remove_and_rename(run, replay_file, capsys):
    run("--replay", str(replay_file), "track", FEDEX_TN, UPS_TN)

    assert run("rename", FEDEX_TN, "Boots") == 0
    assert _stored(run)[FEDEX_TN]["name"] == "Boots"
    assert run("rename", "123", "Nope") == 2

    assert run("remove", FEDEX_TN, "123") == 0
    assert set(_stored(run)) == {UPS_TN}
    assert "not found: 123" in capsys.readouterr().err


def test_corrupt_store_exits_1(run):
    run.store.write_text("[]", encoding="utf-8")
    assert run("list") == 1
