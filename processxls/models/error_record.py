from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

"""One fatal failure of a load / preview / export action, as logged to disk."""

__all__ = [
    "NO_ROW",
    "ErrorRecord",
]

NO_ROW = -1  # failure not attributable to a single data row


def _utc_stamp(now: datetime | None = None) -> str:
    moment = (now or datetime.now(UTC)).astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    """A JSON-lines entry; the key set is fixed.

    ``row`` is the 1-based dataset row for render failures and ``NO_ROW``
    for sheet-, template- or dependency-level failures. ``error_type`` is an
    UPPER_SNAKE classification such as ``ROW_RENDER_FAILED``.
    """
    timestamp: str
    source: str  # workbook file name
    sheet: str
    row: int
    error_type: str
    message: str

    @classmethod
    def create(
        cls,
        source: str,
        sheet: str,
        row: int,
        error_type: str,
        message: str,
        *,
        now: datetime | None = None,
    ) -> ErrorRecord:
        return cls(_utc_stamp(now), source, sheet, row if row > 0 else NO_ROW, error_type, message)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json_line(self) -> str:
        # non-ASCII (Cyrillic sheet names, messages) stays readable in the file
        return json.dumps(self.to_dict(), ensure_ascii=False)
