from __future__ import annotations

from dataclasses import dataclass

from .row_data import AliasedRow, Layout

"""Dataset model: the loaded row set kept by a session between load and reset."""

__all__ = [
    "Dataset",
]


@dataclass(frozen=True)
class Dataset:
    """Rows of the first sheet after ingestion and aliasing.

    Created once per load; previews and exports read from it but never modify it,
    so a failed export leaves it ready for another run.
    """
    source_name: str  # workbook file name (or "<memory>")
    sheet_name: str  # first sheet name
    headers: list[str]  # declared headers or synthesized letters
    has_header: bool  # header row detected
    rows: tuple[AliasedRow, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def layout_counts(self) -> dict[Layout, int]:
        """Count rows per resolved layout (rows may differ within one sheet)."""
        counts = {layout: 0 for layout in Layout}
        for row in self.rows:
            counts[row.layout] += 1
        return counts
