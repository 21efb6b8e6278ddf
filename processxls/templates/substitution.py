from __future__ import annotations

import html
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

"""Placeholder substitution for HTML templates and sheet cells.

Tokens are ``{Key}`` or ``{{Key}}``, matched case-insensitively against the
row's keys. A token body may not contain braces, newlines, ``:`` or ``;`` so
CSS rule blocks in the same markup (``.x{color:red;}``) are never touched.
One tokenizer handles both syntaxes; the double-brace alternative is tried
first at each position, so ``{{Key}}`` is never consumed as ``{`` + ``{Key}``.
"""

__all__ = [
    "PLACEHOLDER_RE",
    "format_value",
    "lookup_value",
    "fill_html_fragment",
    "fill_cell_text",
    "fill_cell_grid",
]

PLACEHOLDER_RE = re.compile(r"\{\{([^{}\n\r:;]+)\}\}|\{([^{}\n\r:;]+)\}")


def format_value(value: Any) -> str:
    """Shared display rule: dates as ``YYYY-MM-DD``, numbers as decimal text."""
    if value is None:
        return ""
    if isinstance(value, datetime | date):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def lookup_value(row: Mapping[str, Any], token: str) -> str:
    """Resolve a token: exact key first, then the first case-insensitive match."""
    key = token.strip()
    if not key:
        return ""
    if key in row:
        return format_value(row[key])
    folded = key.casefold()
    for name, value in row.items():
        if name.casefold() == folded:
            return format_value(value)
    return ""


def _fill(text: str, row: Mapping[str, Any], escape: bool) -> str:
    def replace(m: re.Match[str]) -> str:
        value = lookup_value(row, m.group(1) if m.group(1) is not None else m.group(2))
        return html.escape(value, quote=True) if escape else value

    return PLACEHOLDER_RE.sub(replace, text)


def fill_html_fragment(fragment: str, row: Mapping[str, Any]) -> str:
    """Fill an HTML fragment; substituted values are HTML-escaped."""
    return _fill(fragment, row, escape=True)


def fill_cell_text(text: str, row: Mapping[str, Any]) -> str:
    """Fill a sheet cell's text; values are inserted as plain text."""
    return _fill(text, row, escape=False)


def fill_cell_grid(cells: list[list[Any]], row: Mapping[str, Any]) -> list[list[Any]]:
    """Return a copy of a sheet grid with every string cell containing ``{`` filled.

    Non-string cells (numbers, dates, empty) are copied unchanged.
    """
    return [
        [fill_cell_text(v, row) if isinstance(v, str) and "{" in v else v for v in line]
        for line in cells
    ]
