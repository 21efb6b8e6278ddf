from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

"""Config dataclasses for the invoice/act generator.

These are filled by ``processxls.config.loader`` from YAML and overridden
per run by the caller (CLI flags or session arguments).
"""

DEFAULT_BASIS_CLAUSE = "договор № 70"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class ExportMode(Enum):
    """Packaging of the rendered documents.

    - ZIP: one archive with ``invoice/<name>.pdf`` and ``act/<name>.pdf`` per row
    - SINGLE: two multi-page documents, ``invoices.pdf`` and ``acts.pdf``
    """
    ZIP = "zip"
    SINGLE = "single"


def parse_start_number(value: object, default: int = 1) -> int:
    """Parse a user-typed starting invoice number.

    Accepts ints directly; for text the leading integer is used
    (``"12abc"`` -> 12). Anything else falls back to ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    m = _LEADING_INT.match(str(value if value is not None else ""))
    return int(m.group(1)) if m else default


@dataclass(frozen=True)
class ExportOptions:
    """Parameters chosen at export time; prefix and start are not stored with the dataset."""
    mode: ExportMode = ExportMode.ZIP
    name_column: str = ""  # optional column used for output file names
    invoice_prefix: str = ""
    invoice_start: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "name_column", (self.name_column or "").strip())
        object.__setattr__(self, "invoice_prefix", (self.invoice_prefix or "").strip())


@dataclass(frozen=True)
class TemplateSettings:
    """Template sources; None means the bundled default template."""
    invoice: Path | None = None
    act: Path | None = None


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    templates: TemplateSettings = field(default_factory=TemplateSettings)
    export: ExportOptions = field(default_factory=ExportOptions)
    output_directory: Path = Path("./out")
    basis_clause: str = DEFAULT_BASIS_CLAUSE
