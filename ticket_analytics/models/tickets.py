from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar

"""Typed ticket records produced by the normalizer.

Raw spreadsheet rows stop at the ingestion boundary: everything downstream
(filter engine, aggregation engine) works on one of the two closed variants
below. The class-level ``kind`` tag discriminates them.

Timestamps are kept as ISO-8601 UTC strings (``2024-01-05T10:00:00.000Z``),
empty when the source cell was missing or unparseable.
"""

__all__ = [
    "TicketKind",
    "TicketStatus",
    "FuelTicket",
    "SupportTicket",
    "Ticket",
    "OUT_OF_WARRANTY",
]

OUT_OF_WARRANTY = "Out of Warranty"


class TicketKind(Enum):
    """Which export a record set was normalized from (chosen by the caller)."""
    FUEL = "fuel"
    AFTER_SALES = "after-sales"


class TicketStatus(Enum):
    """Fuel ticket status, derived from the completion-time cell."""
    PENDING = "Pending"
    RESOLVED = "Resolved"


class _TicketBase:
    kind: ClassVar[TicketKind]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out


@dataclass(frozen=True)
class FuelTicket(_TicketBase):
    """One row of the fuel-operations issue sheet."""
    kind: ClassVar[TicketKind] = TicketKind.FUEL

    id: str
    start_time: str = ""
    completion_time: str = ""
    name: str = ""
    company_name: str = ""
    state: str = ""
    fuel_team_spoc: str = ""
    product: str = ""
    reported_issue: str = ""  # "Customer/Partner Reported Issue"
    internal_team_reported_issue: str = ""
    detailed_description: str = ""
    issue_list: str = ""  # ';' separated issue phrases
    status: TicketStatus = TicketStatus.PENDING
    remarks: str = ""
    app_type: str = ""  # "Facing Issue with which app?"
    issue_faced_by: str = ""


@dataclass(frozen=True)
class SupportTicket(_TicketBase):
    """One row of the after-sales sheet.

    ``manual_dip_level`` / ``app_fuel_level`` are the two tank readings compared
    by the calibration check; missing readings coerce to ``0.0``.
    """
    kind: ClassVar[TicketKind] = TicketKind.AFTER_SALES

    id: str
    start_time: str = ""
    completion_time: str = ""
    name: str = ""
    company_name: str = ""
    email: str = ""
    after_sales_spoc: str = ""
    tech_support_spoc: str = ""
    warranty_status: str = OUT_OF_WARRANTY  # In Warranty | AMC | Out of Warranty
    state: str = ""
    product: str = ""
    issue_buckets: str = ""  # severity: Critical | Major | Minor
    hardware_version: str = ""
    operator_app_version: str = ""
    issue_list: str = ""
    firmware_version: str = ""
    ratg_controller: str = ""
    manual_dip_level: float = 0.0
    app_fuel_level: float = 0.0
    dispense_order_qty: float = 0.0
    dispensed_qty: float = 0.0
    job_number: str = ""
    remarks: str = ""
    du_vendor: str = ""
    fcc_hardware_version: str = ""
    order_id: str = ""
    reason_fcc_not_working: str = ""


Ticket = FuelTicket | SupportTicket
