# src/parcel_tracker/pipelines/orchestrator.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Iterable, Mapping, MutableMapping, Optional

from parcel_tracker.api.base import CarrierClient
from parcel_tracker.models import Carrier, Parcel
from parcel_tracker.rules.classifier import group_by_carrier, normalize_tracking_number


class OrchestratorState(str, Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    DISPATCHING = "dispatching"
    MERGING = "merging"
    DONE = "done"


def merge_parcels(
    target: MutableMapping[str, Parcel],
    parcels: Iterable[Parcel],
    lock: threading.Lock,
) -> int:
    """Merge parcels into `target` keyed by tracking number, under `lock`.

    Parcels carrying neither data nor an error are dropped. A later parcel for
    the same number replaces the earlier one. Returns the number merged.
    """
    merged = 0
    with lock:
        for parcel in parcels:
            if not parcel.has_data() and not parcel.has_error():
                continue
            target[parcel.tracking_number] = parcel
            merged += 1
    return merged


class TrackingOrchestrator:
    """Classify tracking numbers, fan out to carrier clients, merge the results.

    One task per carrier group runs on a thread pool. A client that raises
    fails only its own group: every number of that group gets an error parcel.
    """

    def __init__(
        self,
        clients: Mapping[Carrier, CarrierClient],
        *,
        max_workers: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.clients = dict(clients)
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger("parcel_tracker.pipelines.orchestrator")
        self.state = OrchestratorState.IDLE

    def track_all(
        self,
        tracking_numbers: Iterable[str],
        carrier_overrides: Optional[Mapping[str, Carrier]] = None,
    ) -> dict[str, Parcel]:
        numbers = list(tracking_numbers)
        overrides = {normalize_tracking_number(tn): c for tn, c in (carrier_overrides or {}).items()}

        self.state = OrchestratorState.CLASSIFYING
        groups = group_by_carrier([*numbers, *overrides], overrides)
        # results come back in first-seen input order, not grouped by carrier
        order = list(dict.fromkeys(normalize_tracking_number(n) for n in [*numbers, *overrides]))
        self.logger.info(
            "Tracking %d number(s): %s", len([tn for tn in order if tn]),
            ", ".join(f"{c}={len(tns)}" for c, tns in groups.items()) or "none",
        )

        results: dict[str, Parcel] = {}
        lock = threading.Lock()

        if "" in order:
            # blank inputs share one entry under the empty key
            merge_parcels(results, [Parcel.failed("", Carrier.UNKNOWN, "empty tracking number")], lock)

        dispatch: dict[Carrier, list[str]] = {}
        for carrier, tns in groups.items():
            if carrier in self.clients:
                dispatch[carrier] = tns
                continue
            self.logger.warning("No client for carrier %s; skipping %s", carrier, ", ".join(tns))
            reason = "unrecognized tracking number" if carrier is Carrier.UNKNOWN else f"carrier {carrier} is not supported"
            merge_parcels(results, (Parcel.failed(tn, carrier, reason) for tn in tns), lock)

        self.state = OrchestratorState.DISPATCHING
        if dispatch:
            workers = self.max_workers or len(dispatch)
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="carrier") as pool:
                futures = [
                    pool.submit(self._track_group, carrier, tns, results, lock)
                    for carrier, tns in dispatch.items()
                ]
                for fut in futures:
                    fut.result()

        self.state = OrchestratorState.MERGING
        ordered = {tn: results[tn] for tn in order if tn in results}

        self.state = OrchestratorState.DONE
        return ordered

    def _track_group(
        self,
        carrier: Carrier,
        tracking_numbers: list[str],
        results: MutableMapping[str, Parcel],
        lock: threading.Lock,
    ) -> None:
        client = self.clients[carrier]
        try:
            parcels = client.track(list(tracking_numbers))
        except Exception as ex:
            # Any failure of the batch call is attributed to every number in it.
            self.logger.error("%s batch of %d failed: %s", carrier, len(tracking_numbers), ex)
            parcels = [Parcel.failed(tn, carrier, ex) for tn in tracking_numbers]

        wanted = set(tracking_numbers)
        kept = [p for p in parcels if p.tracking_number in wanted]
        returned = {p.tracking_number for p in kept if p.has_data() or p.has_error()}
        missing = [
            Parcel.failed(tn, carrier, f"no result returned by {carrier}")
            for tn in tracking_numbers if tn not in returned
        ]
        if missing:
            self.logger.warning("%s returned no result for %d number(s)", carrier, len(missing))
        merge_parcels(results, [*kept, *missing], lock)
        self.logger.debug("%s merged %d parcel(s)", carrier, len(kept) + len(missing))
