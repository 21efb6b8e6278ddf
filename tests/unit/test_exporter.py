from __future__ import annotations

import asyncio
import io
import zipfile

import pytest

from processxls.models.config_models import ExportMode
from processxls.models.row_data import EnrichedRow
from processxls.services.exporter import (
    ArchiveBuilder,
    ExportError,
    export_documents,
    resolve_base_name,
    sanitize_filename,
)

from tests.conftest import FakeRenderer


def _rows(*numbers: str, **extra) -> list[EnrichedRow]:
    return [
        EnrichedRow(position=i, values={"номер счёта": n, "дата_ру": "01.01.2024", **extra})
        for i, n in enumerate(numbers)
    ]


def _zip_names(data: bytes) -> list[str]:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return zf.namelist()


class TestSanitizeFilename:
    """File name cleanup for archive entries."""

    def test_unsafe_characters_replaced(self):
        assert sanitize_filename('a<b>c:d"e/f\\g|h?i*j') == "a_b_c_d_e_f_g_h_i_j"

    def test_control_chars_and_whitespace(self):
        assert sanitize_filename("  a\x01b    c  ") == "a_b c"
        assert sanitize_filename("a\tb") == "a_b"

    def test_length_capped(self):
        assert len(sanitize_filename("x" * 500)) == 140


class TestResolveBaseName:
    """Base name preference chain."""

    def test_name_column_case_insensitive(self):
        row = EnrichedRow(position=0, values={"Клиент": "ООО Ромашка", "номер счёта": "0001"})
        assert resolve_base_name(row, "клиент") == "ООО Ромашка"

    def test_blank_name_column_falls_back_to_invoice_number(self):
        row = EnrichedRow(position=0, values={"Клиент": "  ", "номер счёта": "A/0001"})
        assert resolve_base_name(row, "Клиент") == "A_0001"

    def test_unknown_column_falls_back_to_invoice_number(self):
        row = EnrichedRow(position=0, values={"номер счёта": 42})
        assert resolve_base_name(row, "нет") == "42"

    def test_row_number_as_last_resort(self):
        row = EnrichedRow(position=6, values={"номер счёта": ""})
        assert resolve_base_name(row) == "row_0007"


def test_archive_builder_overwrites_duplicates():
    archive = ArchiveBuilder()
    archive.add("invoice/a.pdf", b"1")
    archive.add("invoice/a.pdf", b"2")
    assert len(archive) == 1
    assert archive.overwritten == 1
    with zipfile.ZipFile(io.BytesIO(archive.build())) as zf:
        assert zf.read("invoice/a.pdf") == b"2"


class TestExportZip:
    """Per-row archive mode."""

    def test_two_entries_per_row(self, templates):
        invoice, act = templates
        renderer = FakeRenderer()
        result = asyncio.run(export_documents(_rows("0001", "0002", "0003"), invoice, act, renderer))

        assert result.mode is ExportMode.ZIP
        assert result.rows == 3
        assert result.documents == 6
        assert list(result.artifacts) == ["pdf_out.zip"]
        names = _zip_names(result.artifacts["pdf_out.zip"])
        assert names == [
            "invoice/0001.pdf", "act/0001.pdf",
            "invoice/0002.pdf", "act/0002.pdf",
            "invoice/0003.pdf", "act/0003.pdf",
        ]
        assert result.archive_entries == names
        assert len(renderer.calls) == 6
        # invoice then act for each row
        assert "Счёт № 0001" in renderer.calls[0]
        assert "Акт № 0001" in renderer.calls[1]

    def test_name_collision_keeps_last_row(self, templates):
        invoice, act = templates
        rows = _rows("0001", "0001")
        result = asyncio.run(export_documents(rows, invoice, act, FakeRenderer()))
        with zipfile.ZipFile(io.BytesIO(result.artifacts["pdf_out.zip"])) as zf:
            assert zf.namelist() == ["invoice/0001.pdf", "act/0001.pdf"]
            assert zf.read("invoice/0001.pdf") == b"%PDF-fake-3"
        assert result.documents == 4

    def test_progress_reported_in_order(self, templates):
        invoice, act = templates
        seen: list[tuple[int, int, str]] = []
        asyncio.run(
            export_documents(
                _rows("0001", "0002"), invoice, act, FakeRenderer(),
                on_progress=lambda i, total, label: seen.append((i, total, label)),
            )
        )
        assert seen == [(1, 2, "0001 (invoice+act)"), (2, 2, "0002 (invoice+act)")]

    def test_first_failure_aborts_batch(self, templates):
        invoice, act = templates
        renderer = FakeRenderer(fail_on_call=4)  # act of row 2
        seen: list[int] = []
        with pytest.raises(ExportError) as exc:
            asyncio.run(
                export_documents(
                    _rows("0001", "0002", "0003"), invoice, act, renderer,
                    on_progress=lambda i, total, label: seen.append(i),
                )
            )
        assert exc.value.row == 2
        assert "0002" in str(exc.value)
        assert "renderer exploded" in str(exc.value)
        assert len(renderer.calls) == 4
        assert seen == [1]

    def test_name_column_used_for_entries(self, templates):
        invoice, act = templates
        rows = _rows("0001", Клиент="ООО Ромашка")
        result = asyncio.run(export_documents(rows, invoice, act, FakeRenderer(), name_column="клиент"))
        assert result.archive_entries == ["invoice/ООО Ромашка.pdf", "act/ООО Ромашка.pdf"]


class TestExportSingle:
    """Combined two-document mode."""

    def test_two_combined_documents(self, templates):
        invoice, act = templates
        renderer = FakeRenderer()
        result = asyncio.run(
            export_documents(_rows("0001", "0002", "0003"), invoice, act, renderer, mode=ExportMode.SINGLE)
        )
        assert result.mode is ExportMode.SINGLE
        assert list(result.artifacts) == ["invoices.pdf", "acts.pdf"]
        assert result.documents == 6
        assert result.archive_entries == []
        assert len(renderer.calls) == 2
        invoices_html, acts_html = renderer.calls
        assert invoices_html.count('<div class="pdf-page">') == 3
        assert invoices_html.index("Счёт № 0001") < invoices_html.index("Счёт № 0003")
        assert acts_html.count('<div class="pdf-page">') == 3

    def test_progress_per_row(self, templates):
        invoice, act = templates
        seen: list[tuple[int, str]] = []
        asyncio.run(
            export_documents(
                _rows("0001", "0002"), invoice, act, FakeRenderer(), mode=ExportMode.SINGLE,
                on_progress=lambda i, total, label: seen.append((i, label)),
            )
        )
        assert seen == [(1, ""), (2, "")]

    def test_render_failure_raises_export_error(self, templates):
        invoice, act = templates
        with pytest.raises(ExportError) as exc:
            asyncio.run(
                export_documents(_rows("0001"), invoice, act, FakeRenderer(fail_on_call=2), mode=ExportMode.SINGLE)
            )
        assert exc.value.row == 0


def test_status_lines(templates):
    invoice, act = templates
    zip_result = asyncio.run(export_documents(_rows("1", "2"), invoice, act, FakeRenderer()))
    single_result = asyncio.run(
        export_documents(_rows("1", "2"), invoice, act, FakeRenderer(), mode=ExportMode.SINGLE)
    )
    assert zip_result.status_line() == "Done: pdf_out.zip (PDF files: 4)"
    assert single_result.status_line() == "Done: invoices.pdf and acts.pdf (rows: 2)"
