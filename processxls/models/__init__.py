"""Domain models for the sheet -> invoice/act PDF generator.

This package contains the dataclasses and enums shared by ingestion,
enrichment, templating and export.
"""

from .config_models import AppConfig, ExportMode, ExportOptions, TemplateSettings
from .dataset import Dataset
from .export_result import ExportResult
from .row_data import AliasedRow, EnrichedRow, Layout, RawRow

__all__ = [
    # Configuration models
    "AppConfig",
    "ExportMode",
    "ExportOptions",
    "TemplateSettings",
    # Processing models
    "RawRow",
    "AliasedRow",
    "EnrichedRow",
    "Layout",
    "Dataset",
    "ExportResult",
]
