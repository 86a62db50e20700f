# src/parcel_tracker/io/export.py
from __future__ import annotations

import warnings
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd
from openpyxl import load_workbook

from parcel_tracker.models import Parcel

TRACKING_NUMBER_COLUMN = "Tracking Number"
SHEET_NAME = "Parcels"

COLUMNS: tuple[str, ...] = (
    "Name",
    "Carrier",
    TRACKING_NUMBER_COLUMN,
    "Status",
    "Delivered",
    "Last Event",
    "Last Location",
    "Last Updated",
    "Delivery Projection",
    "Error",
    "Tracking URL",
)

_TS_FORMAT = "%Y-%m-%d %H:%M"


def _fmt(ts: Optional[datetime]) -> str:
    return ts.strftime(_TS_FORMAT) if ts is not None else ""


def parcel_row(parcel: Parcel) -> dict[str, object]:
    last = parcel.last_event()
    return {
        "Name": parcel.name,
        "Carrier": parcel.carrier.value,
        TRACKING_NUMBER_COLUMN: parcel.tracking_number,
        "Status": last.type.value if last else ("ERROR" if parcel.has_error() else ""),
        "Delivered": int(parcel.delivered),
        "Last Event": last.description if last else "",
        "Last Location": last.location if last else "",
        "Last Updated": _fmt(last.timestamp) if last else "",
        "Delivery Projection": _fmt(parcel.data.delivery_projection) if parcel.data else "",
        "Error": parcel.error or "",
        "Tracking URL": parcel.tracking_url,
    }


def parcels_to_frame(parcels: Iterable[Parcel]) -> pd.DataFrame:
    """One row per parcel, in COLUMNS order. Timestamps are pre-formatted strings."""
    df = pd.DataFrame([parcel_row(p) for p in parcels], columns=list(COLUMNS))
    df["Delivered"] = pd.to_numeric(df["Delivered"], errors="coerce").fillna(0).astype("int64")
    return df


def format_table(df: pd.DataFrame, columns: Iterable[str] = ("Name", "Carrier", TRACKING_NUMBER_COLUMN,
                                                                "Status", "Last Updated", "Error")) -> str:
    if df.empty:
        return "No parcels stored."
    return df[list(columns)].to_string(index=False)


def _force_text_tracking_numbers(path: Path) -> None:
    # Long numeric tracking numbers must stay text in Excel.
    wb = load_workbook(path)
    ws = wb[SHEET_NAME]
    tn_col_idx = None
    for col_idx, cell in enumerate(ws[1], start=1):
        if (cell.value or "") == TRACKING_NUMBER_COLUMN:
            tn_col_idx = col_idx
            break
    if tn_col_idx is not None:
        for r in range(2, ws.max_row + 1):
            c = ws.cell(row=r, column=tn_col_idx)
            c.value = "" if c.value is None else str(c.value)
            c.number_format = "@"
    wb.save(path)


def export_parcels(parcels: Iterable[Parcel], path: Union[str, Path]) -> Path:
    """Write parcels to .csv or .xlsx, chosen by suffix. Raises ValueError for other suffixes."""
    out = Path(path)
    suffix = out.suffix.lower()
    if suffix not in (".csv", ".xlsx"):
        raise ValueError(f"Unsupported export format {out.suffix!r}; use .csv or .xlsx")

    df = parcels_to_frame(parcels)
    out.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        df.to_csv(out, index=False)
        return out

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with pd.ExcelWriter(out, engine="openpyxl", mode="w") as xw:
            df.to_excel(xw, sheet_name=SHEET_NAME, index=False, na_rep="")
    _force_text_tracking_numbers(out)
    return out
