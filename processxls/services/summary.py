from __future__ import annotations

from ..models.export_result import ExportResult

"""Summary line rendering for an export run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ExportResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY mode={mode} rows={rows} documents={documents} artifacts={n} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> from processxls.models.config_models import ExportMode
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = ExportResult(mode=ExportMode.ZIP, rows=3, documents=6, artifacts={"pdf_out.zip": b""},
        ...                  start_time=t, end_time=t, elapsed_seconds=2.0)
        >>> render_summary_line(r)
        'SUMMARY mode=zip rows=3 documents=6 artifacts=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY mode={result.mode.value} "
        f"rows={result.rows} "
        f"documents={result.documents} "
        f"artifacts={len(result.artifacts)} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
