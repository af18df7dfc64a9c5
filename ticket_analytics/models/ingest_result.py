from __future__ import annotations

from dataclasses import dataclass, field

from .aggregates import CalibrationCheck, FuelOverview, RankEntry, RepeatFailure, SupportOverview, TrendPoint
from .tickets import Ticket, TicketKind

"""Ingest and report result models.

IngestResult is the immutable "active record set" an application holds; a new
ingest replaces it wholesale. DashboardReport bundles every aggregate view
computed over a filtered slice of one IngestResult.
"""


@dataclass(frozen=True)
class IngestResult:
    """Outcome of normalizing one source (file or row batch)."""
    kind: TicketKind
    source: str  # file name, or "<rows>" for in-memory input
    records: tuple[Ticket, ...]
    elapsed_seconds: float = 0.0

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class DashboardReport:
    """All derived views for one filtered record set."""
    kind: TicketKind
    source: str
    total_records: int  # before filtering
    matched_records: int  # after filtering
    overview: FuelOverview | SupportOverview
    trend: tuple[TrendPoint, ...] = ()
    repeat_failures: tuple[RepeatFailure, ...] = ()
    layer_breakdown: tuple[RankEntry, ...] = ()
    average_daily: float = 0.0
    rankings: dict[str, tuple[RankEntry, ...]] = field(default_factory=dict)
    calibration_flags: tuple[CalibrationCheck, ...] = ()  # after-sales only


@dataclass(frozen=True)
class RunSummary:
    """Totals over one CLI run, rendered as the SUMMARY line."""
    success_files: int
    failed_files: int
    total_records: int  # records ingested from successful files
    matched_records: int  # records left after filtering
    elapsed_seconds: float
