from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .config_models import ExportMode

"""Export result model.

Aggregates what one export run produced; used for the SUMMARY line and for
saving artifacts to disk.
"""

ARCHIVE_NAME = "pdf_out.zip"
COMBINED_INVOICES_NAME = "invoices.pdf"
COMBINED_ACTS_NAME = "acts.pdf"


@dataclass(frozen=True)
class ExportResult:
    """Aggregated results of one export run.

    ``documents`` counts rendered invoice/act fragments (always 2 x rows);
    only the packaging differs between modes.
    """
    mode: ExportMode
    rows: int  # rows exported
    documents: int  # rendered invoice + act documents/pages
    artifacts: dict[str, bytes]  # output file name -> bytes
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    archive_entries: list[str] = field(default_factory=list)  # zip mode only

    def status_line(self) -> str:
        """Final status text shown after a successful run."""
        if self.mode is ExportMode.SINGLE:
            return f"Done: {COMBINED_INVOICES_NAME} and {COMBINED_ACTS_NAME} (rows: {self.rows})"
        return f"Done: {ARCHIVE_NAME} (PDF files: {self.documents})"
