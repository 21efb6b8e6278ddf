from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import IO, Any

import numpy as np
import pandas as pd

from ..models.row_data import RawRow

"""Excel reader and tabular ingestion.

- Only the first sheet is read; cells keep native typing (numbers, dates).
- The first non-blank row is a header row only if it looks like one
  (>=2 non-blank text cells, no numbers/dates, not mostly long text).
- Without a header row, columns are keyed A, B, ..., Z, AA, ...
- Blank rows are dropped; an empty result is an error.
"""

__all__ = [
    "IngestError",
    "EmptyInputError",
    "MissingHeaderError",
    "NoDataRowsError",
    "SheetTable",
    "SheetData",
    "read_first_sheet",
    "ingest_table",
    "looks_like_header_row",
    "excel_col_name",
    "is_blank",
]

LONG_TEXT_CHARS = 30  # cells longer than this count as free text
LONG_TEXT_RATIO = 0.6  # at or above this share of long cells the row is data


class IngestError(Exception):
    """Base class for input validation failures."""


class EmptyInputError(IngestError):
    """Raised when the first sheet has no rows or only blank rows."""


class MissingHeaderError(IngestError):
    """Raised when a detected header row carries no header text."""


class NoDataRowsError(IngestError):
    """Raised when no data rows remain after blank-row filtering."""


@dataclass(frozen=True)
class SheetTable:
    """Decoded first sheet: row-major cell values with ``""`` for empty cells."""
    sheet_name: str
    cells: list[list[Any]]
    column_count: int  # declared sheet width


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RawRow]
    has_header: bool


def _normalize_cell(val: Any) -> Any:
    if val is None:
        return ""
    if isinstance(val, float | np.floating):
        if np.isnan(val):
            return ""
        f = float(val)
        return int(f) if f.is_integer() else f
    if isinstance(val, np.integer):
        return int(val)
    if isinstance(val, pd.Timestamp):
        return val.to_pydatetime()
    if val is pd.NaT:
        return ""
    return val


def read_first_sheet(source: Path | str | bytes | IO[bytes]) -> SheetTable:
    """Decode the first sheet of a workbook.

    Parameters
    ----------
    source: workbook path, raw bytes or a binary stream

    NA conversion is disabled so literal strings like ``NA`` stay text;
    missing cells become ``""``.
    """
    if isinstance(source, bytes | bytearray):
        source = io.BytesIO(source)
    with pd.ExcelFile(source) as xls:
        if not xls.sheet_names:
            raise EmptyInputError("workbook has no sheets")
        name = xls.sheet_names[0]
        df = xls.parse(name, header=None, dtype=object, keep_default_na=False, na_values=[])
    cells = [[_normalize_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
    return SheetTable(sheet_name=str(name), cells=cells, column_count=int(df.shape[1]))


def is_blank(value: Any) -> bool:
    """True for None/NaN and text that is empty after trimming."""
    if value is None:
        return True
    if isinstance(value, float) and np.isnan(value):
        return True
    return str(value).strip() == ""


def _is_number_or_date(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int | float | np.number | date | datetime)


def excel_col_name(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA."""
    n = index
    name = ""
    while n >= 0:
        name = chr(65 + n % 26) + name
        n = n // 26 - 1
    return name


def looks_like_header_row(row: list[Any]) -> bool:
    """Heuristic: is this first non-blank row a header row?"""
    non_blank = [v for v in row if not is_blank(v)]
    if len(non_blank) < 2:
        return False
    if any(_is_number_or_date(v) for v in non_blank):
        return False
    longish = sum(1 for v in non_blank if len(str(v)) > LONG_TEXT_CHARS)
    return longish / len(non_blank) < LONG_TEXT_RATIO


def ingest_table(cells: list[list[Any]], column_count: int = 0, sheet_name: str = "") -> SheetData:
    """Turn raw sheet cells into RawRows with best-effort header detection.

    Steps:
    1. Skip leading blank rows (padding)
    2. Classify the first non-blank row as header or data
    3. Build one RawRow per following non-blank row
    """
    if not cells:
        raise EmptyInputError(f"sheet '{sheet_name}' is empty")

    first = next((i for i, r in enumerate(cells) if r and not all(is_blank(v) for v in r)), -1)
    if first == -1:
        raise EmptyInputError(f"sheet '{sheet_name}' is empty")

    row0 = cells[first]
    has_header = looks_like_header_row(row0)
    if has_header:
        raw_headers = ["" if is_blank(h) else str(h).strip() for h in row0]
        if not any(raw_headers):
            raise MissingHeaderError(f"sheet '{sheet_name}': header row has no header text")
        columns = [h or f"__COL_{i + 1}" for i, h in enumerate(raw_headers)]
        data_start = first + 1
    else:
        width = column_count or max((len(r) for r in cells), default=0)
        columns = [excel_col_name(i) for i in range(width)]
        data_start = first

    rows: list[RawRow] = []
    for raw in cells[data_start:]:
        values = {col: (raw[i] if i < len(raw) and raw[i] is not None else "") for i, col in enumerate(columns)}
        if all(is_blank(v) for v in values.values()):
            continue
        rows.append(RawRow(position=len(rows), values=values))

    if not rows:
        raise NoDataRowsError(f"sheet '{sheet_name}' has no data rows")

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows, has_header=has_header)
