from __future__ import annotations

import argparse
import os
import sys
import time
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from ticket_analytics.config.loader import AnalyticsConfig, ConfigError, load_config
from ticket_analytics.excel.reader import IngestError, ParseError, read_sheet
from ticket_analytics.logging.error_log import ErrorLogBuffer
from ticket_analytics.logging.init import log_summary, setup_logging, source_logger
from ticket_analytics.models.ingest_result import RunSummary
from ticket_analytics.models.tickets import TicketKind
from ticket_analytics.services.filters import FilterSpec
from ticket_analytics.services.ingest import build_report, ingest_file
from ticket_analytics.services.progress import ProgressTracker
from ticket_analytics.services.summary import render_report_lines, render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the optional YAML config (--config or TICKET_ANALYTICS_CONFIG)
- Ingest each file as an independent dataset of the requested kind
- Filter, aggregate and log the per-file report
- Log one SUMMARY line; structural failures also go to logs/errors-*.log

Exit codes: 0 every file ingested, 2 at least one file rejected, 1 fatal
startup error (configuration).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

CONFIG_ENV_VAR = "TICKET_ANALYTICS_CONFIG"

_KINDS = {kind.value: kind for kind in TicketKind}


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env values; existing environment variables win unless ``override``."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _iso_date(text: str) -> date:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {text!r}") from None


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="ticket-analytics",
        description="Fuel-operations / after-sales ticket spreadsheet analytics",
    )
    p.add_argument("files", nargs="+", type=Path, help="Workbook(s) to ingest (.xlsx, .xls, .csv)")
    p.add_argument("--kind", required=True, choices=sorted(_KINDS), help="Ticket schema of the files")
    p.add_argument("--search", default="", help="Case-insensitive search term")
    p.add_argument("--from", dest="start_date", type=_iso_date, default=None, help="Start date (YYYY-MM-DD), inclusive")
    p.add_argument("--to", dest="end_date", type=_iso_date, default=None, help="End date (YYYY-MM-DD), inclusive")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    return p.parse_args(argv)


def _inspect_data(files: list[Path]) -> int:
    for f in files:
        print(f"FILE: {f.name}")
        try:
            sheet = read_sheet(f)
        except ParseError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  SHEET: {sheet.sheet_name} cols={sheet.columns}")
        print("    sample_rows=", sheet.rows[:3])
    return EXIT_SUCCESS_ALL


def _resolve_config(args: argparse.Namespace) -> AnalyticsConfig:
    config_path = args.config
    if config_path is None and os.getenv(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])
    return load_config(config_path)


def main(argv: list[str] | None = None) -> int:
    # None -> real argv; an explicit [] must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    _load_env_file(Path(".env"))

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.files)

    kind = _KINDS[args.kind]
    spec = FilterSpec.from_mapping(
        {"search_term": args.search, "start_date": args.start_date, "end_date": args.end_date}
    )
    error_log = ErrorLogBuffer()
    started = time.perf_counter()
    success = total_records = matched = 0

    with ProgressTracker(len(args.files)) as progress:
        for path in args.files:
            progress.start_file(path)
            file_logger = source_logger(path.name)
            try:
                result = ingest_file(path, kind, cfg)
            except IngestError as e:
                record = error_log.record_failure(path.name, kind, e)
                file_logger.error(str(e))
                file_logger.debug(f"rejected as {record.error_type}")
                progress.finish_file(success=False)
                continue

            report = build_report(result, spec, cfg)
            for line in render_report_lines(report):
                logger.info(line)
            success += 1
            total_records += report.total_records
            matched += report.matched_records
            progress.finish_file(success=True)

    failed = len(error_log)
    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path}")

    summary = RunSummary(
        success_files=success,
        failed_files=failed,
        total_records=total_records,
        matched_records=matched,
        elapsed_seconds=time.perf_counter() - started,
    )
    log_summary(render_summary_line(len(args.files), summary))

    return EXIT_PARTIAL_FAILURE if failed else EXIT_SUCCESS_ALL
