"""Text summary and Excel workbook output for aggregation snapshots."""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path
from typing import List

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .models import Snapshot, Tally

SUMMARY_SHEET = "Summary"
COUNTRIES_SHEET = "Countries"
CITIES_SHEET = "Cities"

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(patternType="solid", fgColor="FFFF40FF")
HEADER_BORDER = Border(
    left=Side(style="thin", color="000000"),
    right=Side(style="thin", color="000000"),
    top=Side(style="thin", color="000000"),
    bottom=Side(style="thin", color="000000"),
)

LOGGER = logging.getLogger(__name__)

PathInput = str | Path | PathLike[str]


def _ranked_lines(title: str, tally: Tally, top: int) -> List[str]:
    if not tally or top <= 0:
        return []
    lines = [title]
    for rank, (label, km) in enumerate(tally[:top], start=1):
        lines.append(f"{rank}) {label} {int(km)}km")
    return lines


def format_summary(snapshot: Snapshot, top: int = 3) -> str:
    """Render the headline total plus the ``top`` countries and cities.

    Kilometres are truncated to whole numbers.
    """

    lines = [f"You ran {int(snapshot.total_km)}km in total."]
    lines.extend(_ranked_lines("Your top countries were:", snapshot.countries, top))
    lines.extend(_ranked_lines("Your top cities were:", snapshot.cities, top))
    return "\n".join(lines)


def _tally_frame(label: str, tally: Tally, total_km: float) -> pd.DataFrame:
    rows = [
        {
            label: name,
            "Distance (km)": round(km, 3),
            "Share (%)": round(100.0 * km / total_km, 2) if total_km > 0 else 0.0,
        }
        for name, km in tally
    ]
    return pd.DataFrame(rows, columns=[label, "Distance (km)", "Share (%)"])


def _summary_frame(snapshot: Snapshot) -> pd.DataFrame:
    rows = [
        ("Total distance (km)", round(snapshot.total_km, 3)),
        ("Routes processed", snapshot.processed),
        ("Routes total", snapshot.total),
        ("Unique coordinates", snapshot.unique_coords),
        ("Newly geocoded", snapshot.geocoded_count),
        ("Complete", "yes" if snapshot.done else "no"),
    ]
    diagnostics = snapshot.diagnostics
    if diagnostics is not None:
        rows.extend(
            [
                ("Routes received", diagnostics.routes_received),
                ("Discarded (too short)", diagnostics.discarded_too_short),
                ("Discarded (invalid distance)", diagnostics.discarded_invalid_distance),
                ("Skipped (invalid coordinate)", diagnostics.skipped_invalid_coordinate),
                ("Cache hits", diagnostics.cache_hits),
                ("Cache misses", diagnostics.cache_misses),
                ("Lookup failures", diagnostics.lookup_failures),
            ]
        )
    return pd.DataFrame(rows, columns=["Metric", "Value"])


def _autosize(ws: Worksheet) -> None:
    from .config import (
        EXCEL_AUTOSIZE_COLUMNS,
        EXCEL_AUTOSIZE_MAX_ROWS,
        EXCEL_AUTOSIZE_MAX_WIDTH,
        EXCEL_AUTOSIZE_MIN_WIDTH,
        EXCEL_AUTOSIZE_PADDING,
    )

    if not EXCEL_AUTOSIZE_COLUMNS or ws.max_row > EXCEL_AUTOSIZE_MAX_ROWS:
        return
    for col_cells in ws.columns:
        col_letter = getattr(col_cells[0], "column_letter", None)
        max_len = max(
            (len(str(cell.value)) for cell in col_cells if cell.value is not None),
            default=0,
        )
        width = min(
            EXCEL_AUTOSIZE_MAX_WIDTH,
            max(EXCEL_AUTOSIZE_MIN_WIDTH, max_len + EXCEL_AUTOSIZE_PADDING),
        )
        if col_letter:
            ws.column_dimensions[col_letter].width = width


def _style_header_row(ws: Worksheet, row_idx: int = 1) -> None:
    for col_idx in range(1, ws.max_column + 1):
        cell = ws.cell(row=row_idx, column=col_idx)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER


def write_report(filepath: PathInput, snapshot: Snapshot) -> Path:
    """Write ``Summary``, ``Countries`` and ``Cities`` sheets to ``filepath``."""

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    frames = {
        SUMMARY_SHEET: _summary_frame(snapshot),
        COUNTRIES_SHEET: _tally_frame("Country", snapshot.countries, snapshot.total_km),
        CITIES_SHEET: _tally_frame("City", snapshot.cities, snapshot.total_km),
    }
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
            ws = writer.sheets[sheet_name]
            _style_header_row(ws)
            _autosize(ws)
    LOGGER.info(
        "Wrote report to %s (%d countries, %d cities)",
        path,
        len(snapshot.countries),
        len(snapshot.cities),
    )
    return path


__all__ = ["format_summary", "write_report"]
