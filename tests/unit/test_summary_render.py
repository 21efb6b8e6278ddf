from __future__ import annotations

from datetime import UTC, datetime

import pytest

from processxls.models.config_models import ExportMode
from processxls.models.export_result import ExportResult
from processxls.services.summary import render_summary_line


def _result(mode: ExportMode, rows: int, artifacts: dict[str, bytes], elapsed: float) -> ExportResult:
    t = datetime(2024, 1, 1, tzinfo=UTC)
    return ExportResult(
        mode=mode,
        rows=rows,
        documents=rows * 2,
        artifacts=artifacts,
        start_time=t,
        end_time=t,
        elapsed_seconds=elapsed,
    )


def test_render_summary_zip():
    line = render_summary_line(_result(ExportMode.ZIP, 3, {"pdf_out.zip": b""}, 2.0))
    assert line == "SUMMARY mode=zip rows=3 documents=6 artifacts=1 elapsed_sec=2"


def test_render_summary_single():
    line = render_summary_line(_result(ExportMode.SINGLE, 5, {"invoices.pdf": b"", "acts.pdf": b""}, 1.25))
    assert line == "SUMMARY mode=single rows=5 documents=10 artifacts=2 elapsed_sec=1.25"


@pytest.mark.parametrize(
    "elapsed, expected",
    [
        (0.0, "0"),
        (0.0012, "0.0012"),
        (3.14159, "3.142"),
        (10.5, "10.5"),
    ],
)
def test_elapsed_formatting(elapsed, expected):
    line = render_summary_line(_result(ExportMode.ZIP, 1, {}, elapsed))
    assert line.endswith(f"elapsed_sec={expected}")
