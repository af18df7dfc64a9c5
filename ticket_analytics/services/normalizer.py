from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from ..excel.coerce import coerce_date, coerce_number
from ..excel.reader import ParseError
from ..excel.resolver import resolve
from ..models.tickets import (
    OUT_OF_WARRANTY,
    FuelTicket,
    SupportTicket,
    Ticket,
    TicketKind,
    TicketStatus,
)

logger = logging.getLogger(__name__)

"""Record normalizer: RawRow -> FuelTicket | SupportTicket.

Each schema field has an ordered list of accepted header variants. The lists
are configuration: callers may append variants through ``aliases`` without
touching the algorithm. Every row yields exactly one record; rows are never
dropped here (filtering belongs to the filter engine).
"""

__all__ = [
    "FUEL_HEADERS",
    "AFTER_SALES_HEADERS",
    "NUMERIC_FIELDS",
    "DATE_FIELDS",
    "headers_for",
    "normalize",
    "normalize_row",
]

FUEL_HEADERS: dict[str, tuple[str, ...]] = {
    "id": ("Id", "ID"),
    "start_time": ("Start time", "StartTime"),
    "completion_time": ("Completion time", "CompletionTime"),
    "name": ("Name",),
    "company_name": ("Company Name", "Customer/Partner"),
    "state": ("State",),
    "fuel_team_spoc": ("Fuel Team SPOC",),
    "product": ("Product",),
    "reported_issue": ("Customer/Partner Reported Issue", "Reported Issue"),
    "internal_team_reported_issue": ("Internal Team Reported Issue", "Internal Issue"),
    "detailed_description": ("Describe the issue in detail", "Description"),
    "issue_list": ("Issue(s) List", "Issue List"),
    "remarks": ("Remarks",),
    "app_type": ("Facing Issue with which app", "App Type"),
    "issue_faced_by": ("Issue faced by", "IssueFacedBy"),
}

AFTER_SALES_HEADERS: dict[str, tuple[str, ...]] = {
    "id": ("Id", "ID"),
    "start_time": ("Start time", "StartTime"),
    "completion_time": ("Completion time", "CompletionTime"),
    "name": ("Name",),
    "company_name": ("Company Name", "Customer/Partner"),
    "email": ("Email",),
    "after_sales_spoc": ("After Sales SPOC",),
    "tech_support_spoc": ("Tech Support Team SPOC",),
    "warranty_status": ("In Warranty or AMC", "Warranty"),
    "state": ("State",),
    "product": ("Product",),
    "issue_buckets": ("Issue Buckets",),
    "hardware_version": ("RATG Hardware Version", "Hardware Version"),
    "operator_app_version": ("Operator App Version",),
    "issue_list": ("Issue(s) List", "Hardware Issue", "Issue List"),
    "firmware_version": ("FCC Firmware Version", "Firmware Version"),
    "ratg_controller": ("RATG Controller",),
    "manual_dip_level": ("Manual Dip", "ManualDip"),
    # "App" alone is the loosest variant, keep it last
    "app_fuel_level": ("App Fuel Level", "Fuel Level as visible", "App"),
    "dispense_order_qty": ("Dispense Order Quantity", "Order Quantity"),
    "dispensed_qty": ("Dispensed Quantity",),
    "job_number": ("JOB Number", "RFS", "RFD"),
    "remarks": ("Remarks",),
    "du_vendor": ("DU Vendor",),
    "fcc_hardware_version": ("FCC Hardware Version",),
    "order_id": ("Order ID",),
    "reason_fcc_not_working": ("Reasons for FCC Not Working",),
}

DATE_FIELDS = frozenset({"start_time", "completion_time"})
NUMERIC_FIELDS = frozenset({"manual_dip_level", "app_fuel_level", "dispense_order_qty", "dispensed_qty"})

_BASE_HEADERS = {
    TicketKind.FUEL: FUEL_HEADERS,
    TicketKind.AFTER_SALES: AFTER_SALES_HEADERS,
}


def headers_for(
    kind: TicketKind, aliases: Mapping[str, Sequence[str]] | None = None
) -> dict[str, tuple[str, ...]]:
    """Built-in header candidates for ``kind`` with configured extras appended.

    Unknown field names in ``aliases`` are ignored with a warning.
    """
    base = _BASE_HEADERS[kind]
    if not aliases:
        return dict(base)
    merged = dict(base)
    for field_name, extra in aliases.items():
        if field_name not in base:
            logger.warning(f"header alias for unknown {kind.value} field ignored: {field_name}")
            continue
        known = merged[field_name]
        merged[field_name] = known + tuple(h for h in extra if h not in known)
    return merged


def _field_values(row: Mapping[str, Any], headers: Mapping[str, Sequence[str]]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field_name, candidates in headers.items():
        text = resolve(row, candidates)
        if field_name in DATE_FIELDS:
            values[field_name] = coerce_date(text)
        elif field_name in NUMERIC_FIELDS:
            values[field_name] = coerce_number(text)
        else:
            values[field_name] = text
    return values


def normalize_row(
    row: Mapping[str, Any], index: int, kind: TicketKind, headers: Mapping[str, Sequence[str]]
) -> Ticket:
    """Map one raw row onto the ``kind`` schema. ``index`` is used for a synthetic id."""
    values = _field_values(row, headers)
    values["id"] = values["id"] or f"ROW-{index}"
    if kind is TicketKind.FUEL:
        # status follows the raw cell: an unparseable completion time still counts as done
        completed = resolve(row, headers["completion_time"])
        values["status"] = TicketStatus.RESOLVED if completed else TicketStatus.PENDING
        return FuelTicket(**values)
    values["warranty_status"] = values["warranty_status"] or OUT_OF_WARRANTY
    return SupportTicket(**values)


def _unique_id(candidate: str, seen: set[str]) -> str:
    if candidate not in seen:
        return candidate
    n = 2
    while f"{candidate}#{n}" in seen:
        n += 1
    return f"{candidate}#{n}"


def normalize(
    rows: Iterable[Mapping[str, Any]],
    kind: TicketKind,
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> list[Ticket]:
    """Normalize a batch of raw rows into typed records of one kind.

    Output length always equals input length. Ids are made unique within the
    batch: a repeated id gets a ``#<n>`` suffix.

    Raises:
        ParseError: ``rows`` is not an iterable of mappings.
    """
    if isinstance(rows, (str, bytes)) or isinstance(rows, Mapping):
        raise ParseError(f"expected a sequence of rows, got {type(rows).__name__}")
    try:
        batch = list(rows)
    except TypeError as e:
        raise ParseError(f"expected a sequence of rows: {e}") from e

    headers = headers_for(kind, aliases)
    records: list[Ticket] = []
    seen: set[str] = set()
    for index, row in enumerate(batch):
        if not isinstance(row, Mapping):
            raise ParseError(f"row {index} is not a mapping (got {type(row).__name__})")
        record = normalize_row(row, index, kind, headers)
        unique = _unique_id(record.id, seen)
        if unique != record.id:
            logger.debug(f"duplicate id {record.id!r} at row {index} renamed to {unique!r}")
            record = replace(record, id=unique)
        seen.add(unique)
        records.append(record)
    logger.debug(f"normalized {len(records)} {kind.value} rows")
    return records
