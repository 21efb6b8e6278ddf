from __future__ import annotations

import re
from typing import Any

from ..models.row_data import AliasedRow, Layout, RawRow
from .reader import excel_col_name

"""Layout resolution and semantic aliasing.

Two historical column orderings exist for the source list. The layout is
decided per row, so rows of one sheet may resolve differently.
"""

__all__ = [
    "TRANSPORT_MARKER",
    "resolve_layout",
    "apply_aliases",
    "alias_rows",
]

TRANSPORT_MARKER = "ту по перевозке"
MAX_INVOICE_NO_LEN = 10

_DIGITS = re.compile(r"^\s*\d+\s*$")

# semantic key -> source column per layout (None: not present in that layout)
_COLUMN_MAP: dict[str, dict[Layout, str | None]] = {
    "номер счёта": {Layout.NEW: "A", Layout.LEGACY: None},
    "описание": {Layout.NEW: "B", Layout.LEGACY: "A"},
    "маршрут": {Layout.NEW: "C", Layout.LEGACY: "B"},
    "префикс авто": {Layout.NEW: "D", Layout.LEGACY: "C"},
    "номер авто": {Layout.NEW: "E", Layout.LEGACY: "D"},
    "водитель": {Layout.NEW: "F", Layout.LEGACY: "E"},
    "сумма": {Layout.NEW: "G", Layout.LEGACY: "F"},
    "дата": {Layout.NEW: "I", Layout.LEGACY: "H"},
}
_DATE_ALIASES = ("дата счёта", "Дата счёта")


def _cell(values: dict[str, Any], letter: str) -> Any:
    return values.get(letter, "")


def _looks_like_invoice_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, str) and bool(_DIGITS.match(value)) and len(value.strip()) <= MAX_INVOICE_NO_LEN


def resolve_layout(values: dict[str, Any]) -> Layout:
    """Pick the column layout for one row.

    NEW iff column A is a short numeric invoice id and column B mentions
    the transport-service marker; LEGACY otherwise.
    """
    a = _cell(values, excel_col_name(0))
    b = _cell(values, excel_col_name(1))
    is_marker = isinstance(b, str) and TRANSPORT_MARKER in b.lower()
    return Layout.NEW if _looks_like_invoice_number(a) and is_marker else Layout.LEGACY


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def apply_aliases(row: RawRow) -> AliasedRow:
    """Merge semantic keys over the raw keys of ``row``.

    Semantic keys win on collision, except when their source column does not
    exist in the row (header-named sheets have no A..I keys), so named raw
    columns stay intact.
    """
    layout = resolve_layout(row.values)
    aliases: dict[str, Any] = {}
    present: set[str] = set()
    for key, columns in _COLUMN_MAP.items():
        column = columns[layout]
        if column is None:
            continue
        aliases[key] = _cell(row.values, column)
        if column in row.values:
            present.add(key)

    aliases["авто"] = f"{_text(aliases['префикс авто'])}{_text(aliases['номер авто'])}".strip()
    aliases["услуга"] = f"{_text(aliases['описание'])}{_text(aliases['маршрут'])}".strip()
    for key in _DATE_ALIASES:
        aliases[key] = aliases["дата"]
        if "дата" in present:
            present.add(key)
    if {"префикс авто", "номер авто"} & present:
        present.add("авто")
    if {"описание", "маршрут"} & present:
        present.add("услуга")

    merged = dict(row.values)
    for key, value in aliases.items():
        if key in present or key not in merged:
            merged[key] = value
    return AliasedRow(position=row.position, values=merged, layout=layout)


def alias_rows(rows: list[RawRow]) -> tuple[AliasedRow, ...]:
    return tuple(apply_aliases(r) for r in rows)
