from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ..config.loader import AnalyticsConfig
from ..excel.reader import IngestError, ParseError, read_rows
from ..models.ingest_result import DashboardReport, IngestResult
from ..models.tickets import TicketKind
from . import aggregation
from .filters import FilterSpec
from .normalizer import normalize

logger = logging.getLogger(__name__)

"""Ingest orchestration: source -> IngestResult -> DashboardReport.

Two failure tiers:
- structural (ParseError, EmptyResultError) reject the whole source and are
  raised to the caller with one actionable message;
- per-field problems are defaulted inside the normalizer and never surface.

Each call builds a new IngestResult; the caller swaps its active record set
for the new one instead of merging.
"""

__all__ = [
    "IngestError",
    "ParseError",
    "EmptyResultError",
    "ingest_rows",
    "ingest_file",
    "build_report",
]


class EmptyResultError(IngestError):
    """Raised when a source parses but yields no records."""


def ingest_rows(
    rows: Iterable[Mapping[str, Any]],
    kind: TicketKind,
    config: AnalyticsConfig | None = None,
    *,
    source: str = "<rows>",
) -> IngestResult:
    """Normalize in-memory rows into an IngestResult.

    Raises:
        ParseError: rows are not tabular (not a sequence of mappings)
        EmptyResultError: nothing to show after normalization
    """
    cfg = config or AnalyticsConfig()
    started = time.perf_counter()
    records = normalize(rows, kind, cfg.aliases_for(kind))
    if not records:
        raise EmptyResultError(f"no records found in {source}")
    elapsed = time.perf_counter() - started
    logger.debug(f"ingested {len(records)} {kind.value} records from {source} in {elapsed:.3f}s")
    return IngestResult(kind=kind, source=source, records=tuple(records), elapsed_seconds=elapsed)


def ingest_file(path: Path, kind: TicketKind, config: AnalyticsConfig | None = None) -> IngestResult:
    """Read the first worksheet of ``path`` and normalize it as ``kind``."""
    path = Path(path)
    started = time.perf_counter()
    rows = read_rows(path)
    result = ingest_rows(rows, kind, config, source=path.name)
    return IngestResult(
        kind=result.kind,
        source=result.source,
        records=result.records,
        elapsed_seconds=time.perf_counter() - started,
    )


def build_report(
    result: IngestResult,
    spec: FilterSpec | None = None,
    config: AnalyticsConfig | None = None,
) -> DashboardReport:
    """Filter the result's records and compute every view for its kind."""
    cfg = config or AnalyticsConfig()
    spec = spec or FilterSpec()
    records = spec.apply(result.records)

    if result.kind is TicketKind.FUEL:
        overview = aggregation.fuel_overview(records, top=cfg.top_n)
        rankings = {
            "issues": tuple(aggregation.top_n(aggregation.issue_ranking(records), cfg.top_n)),
            "customers": tuple(aggregation.top_n(aggregation.customer_ranking(records), cfg.top_n)),
            "products": tuple(aggregation.product_ranking(records)),
            "app_types": tuple(aggregation.app_type_ranking(records)),
        }
        calibration = ()
    else:
        overview = aggregation.support_overview(records, threshold=cfg.calibration_threshold)
        rankings = {
            "issues": tuple(aggregation.top_n(aggregation.issue_ranking(records), cfg.top_n)),
            "customers": tuple(aggregation.top_n(aggregation.customer_ranking(records), cfg.top_n)),
            "vendors": tuple(aggregation.vendor_ranking(records)),
            "fcc_reasons": tuple(aggregation.fcc_reason_ranking(records)),
            "severity": tuple(aggregation.severity_ranking(records)),
            "hardware_versions": tuple(aggregation.hardware_version_ranking(records)),
        }
        calibration = tuple(aggregation.calibration_alerts(records, threshold=cfg.calibration_threshold))

    return DashboardReport(
        kind=result.kind,
        source=result.source,
        total_records=len(result.records),
        matched_records=len(records),
        overview=overview,
        trend=tuple(aggregation.monthly_trend(records)),
        repeat_failures=tuple(aggregation.repeat_failures(records, limit=cfg.repeat_limit)),
        layer_breakdown=tuple(aggregation.layer_breakdown(records)),
        average_daily=aggregation.average_daily_count(records),
        rankings=rankings,
        calibration_flags=calibration,
    )
