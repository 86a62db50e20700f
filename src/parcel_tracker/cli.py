# src/parcel_tracker/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config.env import EnvError, get_app_env, load_env
from .config.logging_config import get_logger, resolve_level
from .io.store import DEFAULT_STORE_PATH, JsonParcelStore
from .models import Carrier, EnvCfg


def _split_numbers(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="parcel-tracker",
        description="Track FedEx, UPS and USPS parcels from the terminal.",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Default: LOG_LEVEL or WARNING",
    )
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Disable console logging (file logging remains).",
    )
    p.add_argument("--log-file", type=Path, default=None, help="Also log to this rotating file.")
    p.add_argument("--env-file", type=Path, default=None,
                   help="Path to a .env file. Default: nearest .env at or above the working directory")
    p.add_argument("--store", type=Path, default=None,
                   help=f"Parcel store JSON file. Default: PARCEL_TRACKER_STORE or {DEFAULT_STORE_PATH}")
    p.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="JSON file of saved carrier responses to serve instead of calling the live APIs.",
    )
    p.add_argument(
        "--strict-env",
        action="store_true",
        help="Require at least one complete carrier credential pair; otherwise exit 2.",
    )

    sub = p.add_subparsers(dest="command", required=True)

    track = sub.add_parser("track", help="Track numbers, save them and print their history.")
    track.add_argument("numbers", nargs="*", help="Tracking numbers; the carrier is detected.")
    for flag, carrier in (("--fedex", Carrier.FEDEX), ("--ups", Carrier.UPS), ("--usps", Carrier.USPS)):
        track.add_argument(flag, type=_split_numbers, action="extend", default=[], metavar="N,..",
                           help=f"Comma-separated numbers to track as {carrier}.")
    track.add_argument("--name", default=None, help="Display name (only with a single number).")
    track.add_argument("--no-save", action="store_true", help="Do not write results to the store.")

    sub.add_parser("sync", help="Re-track every stored parcel.")

    lst = sub.add_parser("list", help="Show stored parcels.")
    lst.add_argument("--export", type=Path, default=None, help="Write the table to a .csv or .xlsx file.")

    rm = sub.add_parser("remove", help="Delete parcels from the store.")
    rm.add_argument("numbers", nargs="+")

    rn = sub.add_parser("rename", help="Set a parcel's display name.")
    rn.add_argument("number")
    rn.add_argument("name")
    return p


def build_clients(env_cfg: EnvCfg, *, replay: Optional[Path], logger: logging.Logger) -> dict:
    """Carrier -> client, for carriers with credentials (or every carrier present in a replay file)."""
    if replay is not None:
        from .api.replay import ReplayClient

        client = ReplayClient(replay)
        logger.info("Replay mode enabled: %s", replay)
        return {c: client for c in client.carriers()}

    from .api.fedex import FedExClient
    from .api.transport import RequestsTransport
    from .api.ups import UPSClient
    from .api.usps import USPSClient

    transport = RequestsTransport()
    factories = {
        Carrier.FEDEX: (FedExClient, env_cfg.FEDEX_BASE_URL),
        Carrier.UPS: (UPSClient, env_cfg.UPS_BASE_URL),
        Carrier.USPS: (USPSClient, env_cfg.USPS_BASE_URL),
    }
    clients = {}
    for carrier in env_cfg.configured_carriers():
        cls, base_url = factories[carrier]
        key, secret = env_cfg.credentials_for(carrier)
        clients[carrier] = cls(key, secret, base_url=base_url or None, transport=transport)
        logger.debug("%s client enabled (base=%s)", carrier, clients[carrier].base_url)
    if not clients:
        logger.warning("No carrier credentials configured; every number will report an error.")
    return clients


def _track_and_report(orchestrator, numbers, overrides, store, *, save: bool, names=None) -> int:
    from .io.render import format_event_history

    results = orchestrator.track_all(numbers, carrier_overrides=overrides)
    for parcel in results.values():
        if names and parcel.tracking_number in names:
            parcel.name = names[parcel.tracking_number]
        if save:
            store.upsert(parcel)
            # the stored record carries the kept name and any last known events
            parcel = store.get(parcel.tracking_number) or parcel
        print(format_event_history(parcel), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    env_error: Optional[EnvError] = None
    env_cfg = EnvCfg()
    try:
        load_env(args.env_file)
        env_cfg = get_app_env(None, strict=args.strict_env and args.replay is None)
    except EnvError as e:
        env_error = e

    logger = get_logger(
        "parcel_tracker",
        level=resolve_level(args.log_level, default=logging.WARNING),
        console=not args.no_console,
        log_file=args.log_file,
    )
    logger.debug("Logger initialized.")

    if env_error is not None:
        logger.error("Environment error: %s", env_error)
        print(f"error: {env_error}", file=sys.stderr)
        return 2
    if args.strict_env:
        logger.info("Strict env passed; carriers configured: %s",
                    ", ".join(str(c) for c in env_cfg.configured_carriers()) or "replay only")

    store_path = args.store or (Path(env_cfg.PARCEL_TRACKER_STORE) if env_cfg.PARCEL_TRACKER_STORE else DEFAULT_STORE_PATH)
    store = JsonParcelStore(store_path)
    logger.debug("Store: %s", store.path)

    try:
        if args.command == "list":
            from .io.export import export_parcels, format_table, parcels_to_frame

            parcels = store.all()
            print(format_table(parcels_to_frame(parcels)))
            if args.export is not None:
                try:
                    out = export_parcels(parcels, args.export)
                except ValueError as e:
                    print(f"error: {e}", file=sys.stderr)
                    return 2
                logger.info("Exported %d parcel(s) to %s", len(parcels), out)
            return 0

        if args.command == "remove":
            missing = [n for n in args.numbers if not store.delete(n)]
            for n in missing:
                print(f"not found: {n}", file=sys.stderr)
            return 0

        if args.command == "rename":
            if not store.rename(args.number, args.name):
                print(f"not found: {args.number}", file=sys.stderr)
                return 2
            return 0

        from .pipelines.orchestrator import TrackingOrchestrator
        from .rules.classifier import normalize_tracking_number

        try:
            clients = build_clients(env_cfg, replay=args.replay, logger=logger)
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return 2
        orchestrator = TrackingOrchestrator(clients, logger=logging.getLogger("parcel_tracker.pipelines.orchestrator"))

        if args.command == "sync":
            stored = store.all()
            if not stored:
                print("No parcels stored.")
                return 0
            overrides = {p.tracking_number: p.carrier for p in stored if p.carrier is not Carrier.UNKNOWN}
            return _track_and_report(orchestrator, [p.tracking_number for p in stored], overrides, store, save=True)

        # track
        overrides: dict[str, Carrier] = {}
        for carrier, nums in ((Carrier.FEDEX, args.fedex), (Carrier.UPS, args.ups), (Carrier.USPS, args.usps)):
            for n in nums:
                overrides[normalize_tracking_number(n)] = carrier
        if not args.numbers and not overrides:
            print("error: no tracking numbers given", file=sys.stderr)
            return 2
        if "" in overrides or any(not normalize_tracking_number(n) for n in args.numbers):
            print("error: empty tracking number", file=sys.stderr)
            return 2
        names = None
        if args.name:
            everything = {normalize_tracking_number(n) for n in args.numbers} | set(overrides)
            if len(everything) != 1:
                print("error: --name needs exactly one tracking number", file=sys.stderr)
                return 2
            names = {everything.pop(): args.name}
        return _track_and_report(orchestrator, args.numbers, overrides, store, save=not args.no_save, names=names)

    except Exception as e:
        logger.exception("Command %s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
