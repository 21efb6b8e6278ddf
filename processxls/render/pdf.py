from __future__ import annotations

import asyncio
import importlib.util
import logging
from collections.abc import Iterable
from typing import Protocol

"""HTML -> PDF rendering through WeasyPrint.

WeasyPrint is imported lazily so loading and previewing work without its
native libraries; ``check_dependencies`` reports what is missing up front.
"""

__all__ = [
    "MissingDependencyError",
    "RenderError",
    "Renderer",
    "PdfRenderer",
    "check_dependencies",
    "LOAD_DEPENDENCIES",
    "EXPORT_DEPENDENCIES",
]

logger = logging.getLogger(__name__)

LOAD_DEPENDENCIES = ("pandas", "openpyxl")
EXPORT_DEPENDENCIES = ("weasyprint",)


class MissingDependencyError(Exception):
    """Raised when a required external collaborator is not installed."""


class RenderError(Exception):
    """Raised when the PDF engine fails on a document."""


def check_dependencies(modules: Iterable[str]) -> None:
    missing = [name for name in modules if importlib.util.find_spec(name) is None]
    if missing:
        raise MissingDependencyError(
            f"required libraries are not installed: {', '.join(missing)}. "
            "Install them (pip install processxls) and retry."
        )


class Renderer(Protocol):
    async def render_async(self, html: str) -> bytes: ...


class PdfRenderer:
    """Renders HTML documents to PDF bytes (A4 portrait, no margins)."""

    requires = EXPORT_DEPENDENCIES

    def __init__(self, *, page_size: str = "A4", margin: str = "0", base_url: str | None = None) -> None:
        self.page_size = page_size
        self.margin = margin
        self.base_url = base_url

    def page_css(self) -> str:
        return f"@page {{ size: {self.page_size} portrait; margin: {self.margin}; }}"

    def render(self, html: str) -> bytes:
        try:
            from weasyprint import CSS, HTML
        except ImportError as e:
            raise MissingDependencyError(f"weasyprint not available: {e}") from e
        try:
            pdf = HTML(string=html, base_url=self.base_url).write_pdf(stylesheets=[CSS(string=self.page_css())])
        except Exception as e:
            raise RenderError(f"PDF rendering failed: {e}") from e
        if not pdf:
            raise RenderError("PDF rendering produced no output")
        logger.debug(f"rendered pdf bytes={len(pdf)}")
        return pdf

    async def render_async(self, html: str) -> bytes:
        """Render off the event loop thread."""
        return await asyncio.to_thread(self.render, html)
