from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bs4 import BeautifulSoup, Doctype

"""HTML template loading and the session-scoped template cache.

A template file is a standalone HTML document. Its ``<style>`` blocks are
extracted verbatim (hoisted into every rendered fragment) and its body markup
carries the placeholders.
"""

__all__ = [
    "TemplateLoadError",
    "TemplateKind",
    "HtmlTemplate",
    "TemplateStore",
    "parse_html_template",
    "BUNDLED_TEMPLATES_DIR",
]

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATES_DIR = Path(__file__).parent


class TemplateLoadError(Exception):
    """Raised when a template file is unreachable or unreadable."""


class TemplateKind(Enum):
    """Document kinds; the value is the default template file name."""
    INVOICE = "inv.html"
    ACT = "act.html"

    @property
    def label(self) -> str:
        return "invoice" if self is TemplateKind.INVOICE else "act"


@dataclass(frozen=True)
class HtmlTemplate:
    styles_text: str  # all <style> contents joined by newlines
    body_html: str  # body markup with placeholders
    source: str = "<memory>"

    def style_tag(self) -> str:
        return f"<style>{self.styles_text}</style>" if self.styles_text else ""


def parse_html_template(text: str, source: str = "<memory>") -> HtmlTemplate:
    """Split a template document into its styles and body markup.

    Fragments without <body> are accepted; everything outside the head
    section is then taken as the body. Commented-out styles are not hoisted.
    """
    soup = BeautifulSoup(text, "html.parser")
    style_tags = soup.find_all("style")
    styles = "\n".join(tag.string or "" for tag in style_tags)
    for tag in style_tags:
        tag.decompose()

    root = soup.body
    if root is None:
        if soup.head is not None:
            soup.head.decompose()
        for node in [n for n in soup.contents if isinstance(n, Doctype)]:
            node.extract()
        root = soup.html or soup
    return HtmlTemplate(styles_text=styles, body_html=root.decode_contents().strip(), source=source)


class TemplateStore:
    """Per-session template cache.

    Each kind is parsed once on first use and reused for every row and every
    export run. Choosing a new source for a kind invalidates only that kind;
    ``reset()`` drops the cache and returns to the sources given at construction.
    """

    def __init__(
        self,
        invoice: Path | None = None,
        act: Path | None = None,
        *,
        default_dir: Path = BUNDLED_TEMPLATES_DIR,
    ) -> None:
        self.default_dir = default_dir
        self._configured: dict[TemplateKind, Path | None] = {TemplateKind.INVOICE: invoice, TemplateKind.ACT: act}
        self._sources: dict[TemplateKind, Path | None] = dict(self._configured)
        self._texts: dict[TemplateKind, str] = {}
        self._parsed: dict[TemplateKind, HtmlTemplate] = {}

    def set_source(self, kind: TemplateKind, path: Path | None) -> None:
        """Select a user-supplied template file (None: back to default)."""
        self._sources[kind] = path
        self._texts.pop(kind, None)
        self._parsed.pop(kind, None)

    def set_text(self, kind: TemplateKind, text: str, source: str = "<memory>") -> None:
        """Use already-read template text for a kind."""
        self._sources[kind] = None
        self._texts[kind] = text
        self._parsed[kind] = parse_html_template(text, source=source)

    def source_path(self, kind: TemplateKind) -> Path:
        return self._sources.get(kind) or self.default_dir / kind.value

    def is_loaded(self, kind: TemplateKind) -> bool:
        return kind in self._parsed

    def get(self, kind: TemplateKind) -> HtmlTemplate:
        """Return the parsed template, loading it on first access."""
        cached = self._parsed.get(kind)
        if cached is not None:
            return cached
        path = self.source_path(kind)
        text = self._texts.get(kind)
        if text is None:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise TemplateLoadError(
                    f"cannot load {kind.value} from {path}: {e}. "
                    f"Select the {kind.label} template file explicitly or check the templates path."
                ) from e
            self._texts[kind] = text
        parsed = parse_html_template(text, source=str(path))
        self._parsed[kind] = parsed
        logger.debug(f"template loaded: {kind.value} from {path}")
        return parsed

    def load_all(self) -> tuple[HtmlTemplate, HtmlTemplate]:
        return self.get(TemplateKind.INVOICE), self.get(TemplateKind.ACT)

    def reset(self) -> None:
        self._sources = dict(self._configured)
        self._texts.clear()
        self._parsed.clear()
