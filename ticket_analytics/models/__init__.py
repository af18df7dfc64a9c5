"""Domain models for the ticket analytics core.

Typed ticket records (the closed ``FuelTicket | SupportTicket`` union), the
aggregate views computed from them, ingest results and error-log records.
"""

from .aggregates import (
    CalibrationCheck,
    FuelOverview,
    RankEntry,
    RepeatFailure,
    SupportOverview,
    TechLayer,
    TrendPoint,
)
from .ingest_result import DashboardReport, IngestResult, RunSummary
from .tickets import FuelTicket, SupportTicket, Ticket, TicketKind, TicketStatus

__all__ = [
    # Records
    "FuelTicket",
    "SupportTicket",
    "Ticket",
    "TicketKind",
    "TicketStatus",
    # Aggregate views
    "CalibrationCheck",
    "FuelOverview",
    "RankEntry",
    "RepeatFailure",
    "SupportOverview",
    "TechLayer",
    "TrendPoint",
    # Ingest
    "DashboardReport",
    "IngestResult",
    "RunSummary",
]
