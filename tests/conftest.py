# Shared pytest fixtures
from __future__ import annotations
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from processxls.templates.loader import TemplateKind, TemplateStore

INVOICE_TEMPLATE = """<!doctype html>
<html lang="ru"><head><meta charset="utf-8">
<style>.sheet{width:210mm;} .x{color:red;}</style>
</head>
<body><div class="sheet"><h1>Счёт № {номер счёта} от {дата_ру}</h1>
<p>{{услуга}}</p><p>{сумма_формат}</p><p>{сумма_пропись}</p></div></body></html>
"""

ACT_TEMPLATE = """<!doctype html>
<html lang="ru"><head><meta charset="utf-8">
<style>.sheet { width: 210mm; }</style>
</head>
<body><div class="sheet"><h1>Акт № {{номер счёта}}</h1><p>{основание}</p><p>{Маршрут}</p></div></body></html>
"""

LEGACY_ROW = ["ТУ по перевозке груза", "Москва - Тверь", "а/м", "А123ВС77", "вод. Иванов И.И.", 15000.5, "", datetime(2024, 3, 5)]
NEW_ROW = [42, "ТУ по перевозке груза", "Тверь - Клин", "а/м", "В456ОР50", "Петров П.П.", 2100, "", datetime(2024, 3, 6)]


class FakeRenderer:
    """Stand-in for the PDF engine: records the HTML and returns marker bytes."""

    requires: tuple[str, ...] = ()

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.calls: list[str] = []
        self.fail_on_call = fail_on_call

    async def render_async(self, html: str) -> bytes:
        self.calls.append(html)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("renderer exploded")
        return f"%PDF-fake-{len(self.calls)}".encode()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PROCESSXLS_CONFIG", raising=False)
        yield p


@pytest.fixture()
def make_excel():
    def _make(path: Path, rows: list[list[Any]], sheet: str = "Список", extra_sheets: dict[str, list[list[Any]]] | None = None) -> Path:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
            for name, extra in (extra_sheets or {}).items():
                pd.DataFrame(extra).to_excel(writer, sheet_name=name, header=False, index=False)
        return path
    return _make


@pytest.fixture()
def template_dir(tmp_path: Path) -> Path:
    d = tmp_path / "templates"
    d.mkdir()
    (d / "inv.html").write_text(INVOICE_TEMPLATE, encoding="utf-8")
    (d / "act.html").write_text(ACT_TEMPLATE, encoding="utf-8")
    return d


@pytest.fixture()
def template_store(template_dir: Path) -> TemplateStore:
    return TemplateStore(default_dir=template_dir)


@pytest.fixture()
def templates(template_store: TemplateStore):
    return template_store.get(TemplateKind.INVOICE), template_store.get(TemplateKind.ACT)


@pytest.fixture()
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()
