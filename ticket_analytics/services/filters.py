from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from typing import Any

from ..excel.coerce import parse_timestamp
from ..models.tickets import FuelTicket, SupportTicket, Ticket

logger = logging.getLogger(__name__)

"""Filter engine: free-text search and inclusive start-date range.

Both predicates are optional and combine with AND. A record without a start
time cannot be placed in a date range, so it is excluded as soon as either
bound is set.
"""

__all__ = [
    "FilterSpec",
    "SEARCH_FIELDS",
    "filter_records",
    "day_start",
    "day_end",
]

SEARCH_FIELDS: dict[type, tuple[str, ...]] = {
    FuelTicket: (
        "id",
        "company_name",
        "name",
        "state",
        "product",
        "reported_issue",
        "internal_team_reported_issue",
        "detailed_description",
        "issue_list",
        "fuel_team_spoc",
    ),
    SupportTicket: (
        "id",
        "company_name",
        "name",
        "state",
        "product",
        "issue_list",
        "issue_buckets",
        "after_sales_spoc",
        "tech_support_spoc",
    ),
}

DateBound = date | datetime | str | None


def _as_date(value: DateBound, label: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_timestamp(str(value).strip())
    if parsed is None:
        logger.warning(f"ignoring unparseable {label} date: {value!r}")
        return None
    return parsed.date()


def day_start(day: date) -> datetime:
    """00:00:00.000 UTC of ``day``."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def day_end(day: date) -> datetime:
    """23:59:59.999 UTC of ``day``."""
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=UTC)


@dataclass(frozen=True)
class FilterSpec:
    search_term: str = ""
    start_date: date | None = None
    end_date: date | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> FilterSpec:
        """Build a spec from loose input (query params, CLI args)."""
        return cls(
            search_term=str(raw.get("search_term") or "").strip(),
            start_date=_as_date(raw.get("start_date"), "start"),
            end_date=_as_date(raw.get("end_date"), "end"),
        )

    @property
    def is_active(self) -> bool:
        return bool(self.search_term) or self.start_date is not None or self.end_date is not None

    def apply(self, records: Iterable[Ticket]) -> list[Ticket]:
        return filter_records(records, self.search_term, self.start_date, self.end_date)


def _matches(record: Ticket, needle: str) -> bool:
    for field_name in SEARCH_FIELDS[type(record)]:
        value = getattr(record, field_name, "")
        if value and needle in str(value).lower():
            return True
    return False


def filter_records(
    records: Iterable[Ticket],
    search_term: str = "",
    start_date: DateBound = None,
    end_date: DateBound = None,
) -> list[Ticket]:
    """Return the records matching the search term and the inclusive date range."""
    needle = (search_term or "").lower()
    lower_day = _as_date(start_date, "start")
    upper_day = _as_date(end_date, "end")
    lower = day_start(lower_day) if lower_day else None
    upper = day_end(upper_day) if upper_day else None

    out: list[Ticket] = []
    for record in records:
        if needle and not _matches(record, needle):
            continue
        if lower is not None or upper is not None:
            started = parse_timestamp(record.start_time)
            if started is None:
                continue
            if lower is not None and started < lower:
                continue
            if upper is not None and started > upper:
                continue
        out.append(record)
    return out
