from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from ..excel.aliases import alias_rows
from ..excel.reader import IngestError, SheetTable, ingest_table, read_first_sheet
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import AppConfig, ExportOptions
from ..models.dataset import Dataset
from ..models.error_record import NO_ROW
from ..models.export_result import ExportResult
from ..models.row_data import EnrichedRow, Layout
from ..render.documents import build_preview_document
from ..render.pdf import LOAD_DEPENDENCIES, MissingDependencyError, PdfRenderer, Renderer, check_dependencies
from ..templates.loader import TemplateKind, TemplateLoadError, TemplateStore
from .enrichment import enrich_row, enrich_rows
from .exporter import ExportError, export_documents

"""Interactive session: load -> preview -> run, and reset.

The session owns the loaded dataset and the template cache. Every failure
leaves a human readable ``Error: ...`` status and is re-raised; the dataset
survives export failures so the user can export again.
"""

__all__ = [
    "SessionError",
    "PreviewDocuments",
    "Session",
]

logger = logging.getLogger(__name__)

_ERROR_TYPES: dict[type[Exception], str] = {
    IngestError: "INPUT_VALIDATION",
    TemplateLoadError: "TEMPLATE_LOAD",
    MissingDependencyError: "MISSING_DEPENDENCY",
    ExportError: "ROW_RENDER_FAILED",
}


class SessionError(Exception):
    """Raised when an action is invoked in the wrong state (e.g. run before load)."""


@dataclass(frozen=True)
class PreviewDocuments:
    invoice_html: str
    act_html: str
    row: EnrichedRow


class Session:
    """Stateful load/preview/run/reset flow over one workbook."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        renderer: Renderer | None = None,
        templates: TemplateStore | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.config = config if config is not None else AppConfig()
        self.renderer: Renderer = renderer if renderer is not None else PdfRenderer()
        if templates is None:
            templates = TemplateStore(self.config.templates.invoice, self.config.templates.act)
        self.templates = templates
        self.error_log = error_log if error_log is not None else ErrorLogBuffer()
        self.dataset: Dataset | None = None
        self.status: list[str] = []

    # status -----------------------------------------------------------------

    def set_status(self, *lines: str) -> None:
        self.status = list(lines)
        for line in lines:
            if line:
                logger.info(line)

    @contextmanager
    def _reporting(self, action: str) -> Iterator[None]:
        try:
            yield
        except Exception as e:
            self.status = [f"Error: {e}"]
            logger.error(f"{action}: {e}")
            error_type = next((t for cls, t in _ERROR_TYPES.items() if isinstance(e, cls)), "UNEXPECTED")
            ds = self.dataset
            self.error_log.append(
                ErrorRecord.create(
                    source=ds.source_name if ds else "<none>",
                    sheet=ds.sheet_name if ds else "<none>",
                    row=getattr(e, "row", NO_ROW),
                    error_type=error_type,
                    message=str(e),
                )
            )
            self.error_log.flush()
            raise

    # actions ----------------------------------------------------------------

    def load(self, source: Path | str | bytes | IO[bytes], *, source_name: str | None = None) -> Dataset:
        """Decode the first sheet of a workbook and keep its aliased rows."""
        if source_name is None:
            source_name = Path(source).name if isinstance(source, str | Path) else "<memory>"
        self.dataset = None
        with self._reporting("load"):
            check_dependencies(LOAD_DEPENDENCIES)
            self.set_status("Reading file...")
            table = read_first_sheet(source)
        return self.load_table(table, source_name=source_name)

    def load_table(self, table: SheetTable, *, source_name: str = "<memory>") -> Dataset:
        """Ingest already decoded cells (see ``read_first_sheet``)."""
        self.dataset = None
        with self._reporting("load"):
            sheet = ingest_table(table.cells, table.column_count, table.sheet_name)
            self.templates.load_all()
            dataset = Dataset(
                source_name=source_name,
                sheet_name=table.sheet_name,
                headers=sheet.columns,
                has_header=sheet.has_header,
                rows=alias_rows(sheet.rows),
            )
        self.dataset = dataset
        counts = dataset.layout_counts()
        self.set_status(
            f"Sheet: {dataset.sheet_name}",
            f"Headers {'detected' if dataset.has_header else 'NOT detected (using A, B, C...)'}",
            f"Columns: {', '.join(dataset.headers)}",
            f"Data rows: {len(dataset)} (layout new={counts[Layout.NEW]} legacy={counts[Layout.LEGACY]})",
            "Templates: inv.html (invoice) + act.html (act).",
            "Placeholders: {FieldName} or {{FieldName}} (case-insensitive).",
        )
        return dataset

    def _require_dataset(self) -> Dataset:
        if self.dataset is None or not len(self.dataset):
            raise SessionError("load a file first")
        return self.dataset

    def preview(self, prefix: str | None = None, start: int | None = None) -> PreviewDocuments:
        """Fill both templates with the first row."""
        with self._reporting("preview"):
            dataset = self._require_dataset()
            invoice, act = self.templates.load_all()
            row = enrich_row(
                dataset.rows[0],
                prefix=(self.config.export.invoice_prefix if prefix is None else prefix.strip()),
                start=(self.config.export.invoice_start if start is None else start),
                basis_clause=self.config.basis_clause,
            )
            return PreviewDocuments(
                invoice_html=build_preview_document(invoice, row.values),
                act_html=build_preview_document(act, row.values),
                row=row,
            )

    def _on_progress(self, index: int, total: int, label: str) -> None:
        self.status = [f"PDF: {index}/{total} - {label}" if label else f"HTML: {index}/{total}"]

    async def run(self, options: ExportOptions | None = None) -> ExportResult:
        """Enrich all rows for this run and export them."""
        options = options or self.config.export
        with self._reporting("export"):
            dataset = self._require_dataset()
            check_dependencies(getattr(self.renderer, "requires", ()))
            invoice = self.templates.get(TemplateKind.INVOICE)
            act = self.templates.get(TemplateKind.ACT)
            self.set_status("Generating PDF... this may take a while for many rows.")
            rows = enrich_rows(dataset.rows, options, self.config.basis_clause)
            result = await export_documents(
                rows,
                invoice,
                act,
                self.renderer,
                mode=options.mode,
                name_column=options.name_column,
                on_progress=self._on_progress,
            )
        self.set_status(result.status_line())
        return result

    def reset(self) -> None:
        """Forget the dataset, template cache and status."""
        self.dataset = None
        self.templates.reset()
        self.status = []
