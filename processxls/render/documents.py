from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..templates.loader import HtmlTemplate
from ..templates.substitution import fill_html_fragment

"""HTML assembly for rendering and preview.

Single-page fragments pin the ``.sheet`` root to one A4 page; combined
documents wrap each row's body in a ``.pdf-page`` block that forces a page
break after every page except the last.
"""

__all__ = [
    "SINGLE_PAGE_OVERRIDE",
    "PAGE_BREAK_STYLE",
    "build_page_html",
    "build_combined_html",
    "build_preview_document",
    "wrap_document",
]

# slightly under 297mm so rounding never spills onto a blank second page
SINGLE_PAGE_OVERRIDE = (
    "<style>.sheet{margin:0 !important; position:relative; top:0; left:0; "
    "height:296.5mm !important; min-height:296.5mm !important; overflow:hidden;}</style>"
)
PAGE_BREAK_STYLE = (
    "<style>.sheet{margin:0 !important;}"
    ".pdf-page{page-break-after:always;}"
    ".pdf-page:last-child{page-break-after:auto;}</style>"
)


def wrap_document(head: str, body: str) -> str:
    return (
        '<!doctype html><html lang="ru"><head><meta charset="utf-8">'
        f"{head}</head><body>{body}</body></html>"
    )


def build_page_html(template: HtmlTemplate, row: Mapping[str, Any]) -> str:
    """One row rendered as a standalone single-page document."""
    return wrap_document(template.style_tag() + SINGLE_PAGE_OVERRIDE, fill_html_fragment(template.body_html, row))


def build_combined_html(template: HtmlTemplate, bodies: Iterable[str]) -> str:
    """Already-filled bodies as one document, one page per body, in order."""
    pages = "".join(f'<div class="pdf-page">{body}</div>' for body in bodies)
    return wrap_document(template.style_tag() + PAGE_BREAK_STYLE, pages)


def build_preview_document(template: HtmlTemplate, row: Mapping[str, Any]) -> str:
    """Standalone HTML for on-screen preview (no page pinning)."""
    return wrap_document(template.style_tag(), fill_html_fragment(template.body_html, row))
