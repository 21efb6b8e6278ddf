#!/usr/bin/env python3
"""Sample workbook generator for trying the invoice/act export.

Generates a headerless transport list in either column layout:
- legacy: A=description, B=route, C="а/м", D=plate, E=driver, F=amount, H=date
- new:    A=invoice number, B=description, C=route, D="а/м", E=plate, F=driver, G=amount, I=date
- mixed:  rows alternate between both layouts
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

ROUTES = ["Москва - Тверь", "Тверь - Клин", "Клин - Москва", "Москва - Рязань"]
DRIVERS = ["вод. Иванов И.И.", "вод. Петров П.П.", "Сидоров С.С.", "вод Кузнецов А.А."]
PLATES = ["А123ВС77", "В456ОР50", "Е789КХ69", "М001ММ62"]
DESCRIPTION = "ТУ по перевозке груза по договору"


def generate_rows(rows: int, layout: str, seed: int = 42) -> list[list[Any]]:
    """Build sheet rows (no header row) for the requested layout."""
    rng = np.random.default_rng(seed)
    dates = pd.date_range("2024-01-01", "2024-12-31", periods=60)
    out: list[list[Any]] = []
    for i in range(rows):
        route = ROUTES[rng.integers(len(ROUTES))]
        driver = DRIVERS[rng.integers(len(DRIVERS))]
        plate = PLATES[rng.integers(len(PLATES))]
        amount = float(np.round(rng.uniform(5_000, 250_000), 2))
        when = dates[rng.integers(len(dates))].to_pydatetime()
        use_new = layout == "new" or (layout == "mixed" and i % 2 == 0)
        if use_new:
            out.append([100 + i, DESCRIPTION, route, "а/м", plate, driver, amount, "", when])
        else:
            out.append([DESCRIPTION, route, "а/м", plate, driver, amount, "", when])
    return out


def create_excel_file(output_path: Path, rows: int, layout: str, seed: int = 42) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(generate_rows(rows, layout, seed))
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Список", header=False, index=False)
    print(f"Created Excel file: {output_path}")
    print(f"  Rows: {rows} (layout: {layout})")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a sample transport list workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s sample.xlsx
  %(prog)s legacy.xlsx --rows 20 --layout legacy
        """,
    )
    parser.add_argument("output", type=Path, help="Output Excel file path")
    parser.add_argument("--rows", type=int, default=10, help="Number of data rows (default: 10)")
    parser.add_argument("--layout", choices=["legacy", "new", "mixed"], default="mixed",
                        help="Column layout (default: mixed)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    try:
        create_excel_file(args.output, args.rows, args.layout, args.seed)
    except OSError as e:
        print(f"\nError generating dataset: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
