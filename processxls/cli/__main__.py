from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from processxls.config.loader import ConfigError, load_config
from processxls.logging.init import log_summary, set_debug, setup_logging
from processxls.models.config_models import AppConfig, ExportMode, ExportOptions, parse_start_number
from processxls.models.export_result import ExportResult
from processxls.services.session import Session
from processxls.services.summary import render_summary_line
from processxls.templates.loader import TemplateKind

"""CLI entrypoint.

Drives one session: load the workbook, then either write preview HTML for the
first row or export all rows and save the artifacts to the output directory.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Spreadsheet rows -> invoice + act PDFs")
    p.add_argument("workbook", type=Path, help="Input .xlsx/.xls file (first sheet is used)")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--mode", choices=[m.value for m in ExportMode], default=None,
                   help="zip: ZIP with invoice+act per row; single: invoices.pdf + acts.pdf")
    p.add_argument("--name-column", default=None, help="Column used for output file names")
    p.add_argument("--prefix", default=None, help="Invoice number prefix")
    p.add_argument("--start", default=None, help="First invoice number (default 1)")
    p.add_argument("--invoice-template", type=Path, default=None, help="Invoice HTML template (inv.html)")
    p.add_argument("--act-template", type=Path, default=None, help="Act HTML template (act.html)")
    p.add_argument("--output-dir", type=Path, default=None, help="Where to save the results")
    p.add_argument("--preview", action="store_true", help="Write preview HTML for the first row and exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _export_options(cfg: AppConfig, args: argparse.Namespace) -> ExportOptions:
    base = cfg.export
    return ExportOptions(
        mode=ExportMode(args.mode) if args.mode else base.mode,
        name_column=base.name_column if args.name_column is None else args.name_column,
        invoice_prefix=base.invoice_prefix if args.prefix is None else args.prefix,
        invoice_start=base.invoice_start if args.start is None else parse_start_number(args.start),
    )


def _save_artifacts(result: ExportResult, out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    saved = []
    for name, data in result.artifacts.items():
        target = out_dir / name
        target.write_bytes(data)
        saved.append(target)
    return saved


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when argv is None; tests pass [] explicitly
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    load_dotenv(dotenv_path=Path(".env"), override=False)

    if args.debug:
        set_debug()

    try:
        cfg = load_config(args.config, required=args.config is not None)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    out_dir = args.output_dir or cfg.output_directory
    options = _export_options(cfg, args)
    cfg = replace(cfg, export=options)

    session = Session(cfg)
    if args.invoice_template is not None:
        session.templates.set_source(TemplateKind.INVOICE, args.invoice_template)
    if args.act_template is not None:
        session.templates.set_source(TemplateKind.ACT, args.act_template)

    if not args.workbook.exists():
        logger.error(f"file not found: {args.workbook}")
        return EXIT_FATAL

    try:
        session.load(args.workbook)
        if args.preview:
            docs = session.preview()
            out_dir.mkdir(parents=True, exist_ok=True)
            (out_dir / "preview_invoice.html").write_text(docs.invoice_html, encoding="utf-8")
            (out_dir / "preview_act.html").write_text(docs.act_html, encoding="utf-8")
            logger.info(f"preview written to {out_dir}")
            return EXIT_SUCCESS
        result = asyncio.run(session.run(options))
    except Exception:
        # session already reported the error as status and in the error log
        return EXIT_FATAL

    for path in _save_artifacts(result, out_dir):
        logger.info(f"saved {path}")
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
