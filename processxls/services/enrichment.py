from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from ..models.config_models import DEFAULT_BASIS_CLAUSE, ExportOptions
from ..models.row_data import AliasedRow, EnrichedRow
from .amount_words import amount_to_words, format_rub_amount

"""Row enrichment: computed presentation fields for one export run.

Enriched rows depend on the user-chosen invoice prefix and start number, so
they are recomputed per run from the stored aliased rows. Nothing here raises;
every derivation falls back to zero/empty.
"""

__all__ = [
    "INVOICE_NO_KEY",
    "format_date_ru",
    "compose_service",
    "synthesize_invoice_number",
    "enrich_row",
    "enrich_rows",
]

INVOICE_NO_KEY = "номер счёта"
DATE_KEYS = ("дата счёта", "Дата счёта", "дата")
VEHICLE_MARKER = "а/м"
DRIVER_MARKER = "вод."
INVOICE_NO_WIDTH = 4

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_RU_DATE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})")
_SPACES = re.compile(r"\s+")
_DRIVER_PREFIX = re.compile(r"^вод\.?\s*", re.IGNORECASE)


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def format_date_ru(value: Any) -> str:
    """Normalize a date to ``DD.MM.YYYY``; unknown text passes through."""
    if isinstance(value, datetime | date):
        return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"
    text = "" if value is None else str(value).strip()
    if not text:
        return ""
    m = _ISO_DATE.match(text)
    if m:
        return f"{m.group(3)}.{m.group(2)}.{m.group(1)}"
    m = _RU_DATE.match(text)
    if m:
        return f"{m.group(1)}.{m.group(2)}.{m.group(3)}"
    return text


def _clean(value: Any) -> str:
    text = "" if value is None else str(value)
    return _SPACES.sub(" ", text.replace("\u00a0", " ")).strip()


def compose_service(description: Any, route: Any, plate: Any, driver: Any) -> str:
    """Build the 3-line service block used by the invoice table.

    Line 1: description and an opening quote; line 2: route, plate and the
    driver marker; line 3: the driver's name without a role prefix.
    """
    desc = _clean(description).replace('"', "")
    desc = _SPACES.sub(" ", desc).strip()
    route_text = _clean(route)
    plate_text = _clean(plate)
    driver_raw = _clean(driver)
    driver_name = _DRIVER_PREFIX.sub("", driver_raw).strip()

    line1 = f'{desc} "' if desc else '"'
    line2 = " ".join(p for p in (route_text, f"{VEHICLE_MARKER} {plate_text}" if plate_text else "", DRIVER_MARKER) if p)
    line3 = driver_name or driver_raw
    return "\n".join(line for line in (line1, line2, line3) if line.strip())


def synthesize_invoice_number(position: int, prefix: str = "", start: int = 1) -> str:
    """``<prefix><start + position, zero-padded to 4 digits>``."""
    return f"{prefix or ''}{start + position:0{INVOICE_NO_WIDTH}d}"


def _first_present(values: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if not _is_blank(values.get(key)):
            return values[key]
    return None


def enrich_row(
    row: AliasedRow,
    prefix: str = "",
    start: int = 1,
    basis_clause: str = DEFAULT_BASIS_CLAUSE,
) -> EnrichedRow:
    """Derive the computed keys for one row.

    ``row.position`` is the row's index in the full dataset; a source invoice
    number is kept verbatim, otherwise one is synthesized from it.
    """
    values = dict(row.values)
    if _is_blank(values.get(INVOICE_NO_KEY)):
        values[INVOICE_NO_KEY] = synthesize_invoice_number(row.position, prefix, start)
    values["__row_index"] = row.position + 1

    amount = values.get("сумма")
    values["основание"] = values["основание"] if not _is_blank(values.get("основание")) else basis_clause
    values["дата_ру"] = format_date_ru(_first_present(values, DATE_KEYS))
    values["сумма_формат"] = format_rub_amount(amount)
    values["сумма_пропись"] = amount_to_words(amount)
    values["услуга"] = compose_service(
        values.get("описание"), values.get("маршрут"), values.get("номер авто"), values.get("водитель")
    )
    return EnrichedRow(position=row.position, values=values)


def enrich_rows(
    rows: tuple[AliasedRow, ...] | list[AliasedRow],
    options: ExportOptions,
    basis_clause: str = DEFAULT_BASIS_CLAUSE,
) -> list[EnrichedRow]:
    return [enrich_row(r, options.invoice_prefix, options.invoice_start, basis_clause) for r in rows]
