from __future__ import annotations

import asyncio
import io
import logging
import re
import zipfile
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from ..models.config_models import ExportMode
from ..models.export_result import (
    ARCHIVE_NAME,
    COMBINED_ACTS_NAME,
    COMBINED_INVOICES_NAME,
    ExportResult,
)
from ..models.row_data import EnrichedRow
from ..render.documents import build_combined_html, build_page_html
from ..render.pdf import Renderer
from ..templates.loader import HtmlTemplate
from ..templates.substitution import fill_html_fragment
from .enrichment import INVOICE_NO_KEY
from .progress import ProgressCallback, ProgressTracker

"""Document batch export.

Rows are processed strictly in order, one at a time; the loop yields to the
event loop once between rows so a caller can repaint progress. The first
failing row aborts the whole batch: no partial archive is produced.

Per-row archive names are not deduplicated; a later row with the same name
overwrites the earlier entry.
"""

__all__ = [
    "ExportError",
    "ArchiveBuilder",
    "sanitize_filename",
    "resolve_base_name",
    "export_documents",
    "INVOICE_DIR",
    "ACT_DIR",
]

logger = logging.getLogger(__name__)

INVOICE_DIR = "invoice"
ACT_DIR = "act"
MAX_NAME_LEN = 140

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_SPACES = re.compile(r"\s+")


class ExportError(Exception):
    """Raised when a row fails to render; aborts the whole batch.

    Attributes:
        row: 1-based row index (0 when not row-specific)
    """

    def __init__(self, message: str, row: int = 0) -> None:
        super().__init__(message)
        self.row = row


class ArchiveBuilder:
    """In-memory accumulation of archive entries, serialised once at the end."""

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}
        self.overwritten = 0

    def add(self, name: str, data: bytes) -> None:
        if name in self._entries:
            self.overwritten += 1
            logger.debug(f"archive entry replaced: {name}")
        self._entries[name] = data

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def build(self) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, data in self._entries.items():
                zf.writestr(name, data)
        return buf.getvalue()


def sanitize_filename(name: str) -> str:
    """Replace unsafe/control characters, collapse whitespace, cap at 140 chars."""
    cleaned = _UNSAFE_CHARS.sub("_", str(name))
    return _SPACES.sub(" ", cleaned).strip()[:MAX_NAME_LEN]


def _find_key(values: Mapping[str, Any], column: str) -> str | None:
    folded = column.casefold()
    return next((k for k in values if k.casefold() == folded), None)


def resolve_base_name(row: EnrichedRow, name_column: str = "") -> str:
    """Output file base name for a row.

    Preference: the designated name column, then the invoice number, then
    ``row_NNNN`` (1-based position).
    """
    candidates: list[Any] = []
    if name_column:
        key = _find_key(row.values, name_column)
        if key is not None:
            candidates.append(row.values[key])
    candidates.append(row.values.get(INVOICE_NO_KEY))
    for value in candidates:
        if value is None or str(value).strip() == "":
            continue
        name = sanitize_filename(str(value))
        if name:
            return name
    return f"row_{row.position + 1:04d}"


async def _export_per_row(
    rows: Sequence[EnrichedRow],
    invoice: HtmlTemplate,
    act: HtmlTemplate,
    renderer: Renderer,
    name_column: str,
    progress: ProgressTracker,
) -> tuple[dict[str, bytes], list[str]]:
    archive = ArchiveBuilder()
    for i, row in enumerate(rows):
        base = resolve_base_name(row, name_column)
        try:
            invoice_pdf = await renderer.render_async(build_page_html(invoice, row.values))
            act_pdf = await renderer.render_async(build_page_html(act, row.values))
        except Exception as e:
            raise ExportError(f"row {i + 1} ({base}): {e}", row=i + 1) from e
        archive.add(f"{INVOICE_DIR}/{base}.pdf", invoice_pdf)
        archive.add(f"{ACT_DIR}/{base}.pdf", act_pdf)
        progress.finish_row(f"{base} (invoice+act)")
        await asyncio.sleep(0)
    return {ARCHIVE_NAME: archive.build()}, archive.names


async def _export_combined(
    rows: Sequence[EnrichedRow],
    invoice: HtmlTemplate,
    act: HtmlTemplate,
    renderer: Renderer,
    progress: ProgressTracker,
) -> dict[str, bytes]:
    invoice_bodies: list[str] = []
    act_bodies: list[str] = []
    for row in rows:
        invoice_bodies.append(fill_html_fragment(invoice.body_html, row.values))
        act_bodies.append(fill_html_fragment(act.body_html, row.values))
        progress.finish_row()
        await asyncio.sleep(0)
    try:
        invoices_pdf = await renderer.render_async(build_combined_html(invoice, invoice_bodies))
        acts_pdf = await renderer.render_async(build_combined_html(act, act_bodies))
    except Exception as e:
        raise ExportError(f"combined document: {e}") from e
    return {COMBINED_INVOICES_NAME: invoices_pdf, COMBINED_ACTS_NAME: acts_pdf}


async def export_documents(
    rows: Sequence[EnrichedRow],
    invoice: HtmlTemplate,
    act: HtmlTemplate,
    renderer: Renderer,
    *,
    mode: ExportMode = ExportMode.ZIP,
    name_column: str = "",
    on_progress: ProgressCallback | None = None,
) -> ExportResult:
    """Render every row's invoice and act and package them per ``mode``.

    Raises:
        ExportError: on the first row (or combined document) that fails to render
    """
    start_time = datetime.now(UTC)
    total = len(rows)
    entries: list[str] = []
    logger.info(f"export started: mode={mode.value} rows={total}")
    with ProgressTracker(total, callback=on_progress) as progress:
        if mode is ExportMode.SINGLE:
            artifacts = await _export_combined(rows, invoice, act, renderer, progress)
        else:
            artifacts, entries = await _export_per_row(rows, invoice, act, renderer, name_column, progress)
    end_time = datetime.now(UTC)
    return ExportResult(
        mode=mode,
        rows=total,
        documents=total * 2,
        artifacts=artifacts,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        archive_entries=entries,
    )
