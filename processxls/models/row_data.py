from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Row models for the sheet -> invoice/act pipeline.

A row passes through three shapes:
- RawRow: one ingested data row keyed by header or positional letter code
- AliasedRow: RawRow plus business keys resolved from one of two column layouts
- EnrichedRow: AliasedRow plus computed presentation fields for one export run

All three are frozen; ``values`` is never mutated after construction.
"""

__all__ = [
    "Layout",
    "RawRow",
    "AliasedRow",
    "EnrichedRow",
]


class Layout(Enum):
    """Column layout chosen for a single row.

    - LEGACY: A=description, B=route, C=vehicle prefix, D=plate, E=driver, F=amount, H=date
    - NEW: A=invoice number, B=description, C=route, D=vehicle prefix, E=plate,
      F=driver, G=amount, I=date
    """
    LEGACY = "legacy"
    NEW = "new"


@dataclass(frozen=True)
class RawRow:
    """Logical representation of one sheet row after ingestion."""
    position: int  # 0-based index within the loaded dataset (blank rows excluded)
    values: dict[str, Any]  # column key -> cell value ("" for empty cells)


@dataclass(frozen=True)
class AliasedRow:
    position: int
    values: dict[str, Any]  # raw keys + semantic keys (semantic wins on collision)
    layout: Layout


@dataclass(frozen=True)
class EnrichedRow:
    position: int
    values: dict[str, Any]  # aliased values + computed keys

    @property
    def invoice_number(self) -> str:
        return str(self.values.get("номер счёта", ""))
