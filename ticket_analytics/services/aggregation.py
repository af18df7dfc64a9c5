from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from functools import reduce

from ..excel.coerce import parse_timestamp
from ..models.aggregates import (
    CalibrationCheck,
    FuelOverview,
    RankEntry,
    RepeatFailure,
    SupportOverview,
    TechLayer,
    TrendPoint,
)
from ..models.tickets import FuelTicket, SupportTicket, Ticket, TicketStatus
from .issues import UNSPECIFIED, classify, tokenize

"""Aggregation engine: record set -> aggregate views.

All functions are pure. They take an already filtered record set, never
mutate it, and return newly built view objects.

Ranking ties are broken by first-seen order: counts are tallied in a Counter
(insertion ordered) and sorted with a stable sort on the count alone.
"""

__all__ = [
    "UNKNOWN",
    "DEFAULT_CALIBRATION_THRESHOLD",
    "rank",
    "top_n",
    "issue_ranking",
    "customer_ranking",
    "vendor_ranking",
    "fcc_reason_ranking",
    "hardware_version_ranking",
    "product_ranking",
    "app_type_ranking",
    "severity_ranking",
    "layer_breakdown",
    "monthly_trend",
    "repeat_failures",
    "calibration_checks",
    "calibration_alerts",
    "average_daily_count",
    "fuel_overview",
    "support_overview",
]

UNKNOWN = "Unknown"
DEFAULT_CALIBRATION_THRESHOLD = 0.05
TREND_LABEL_FORMAT = "%b %y"


# ---------------------------------------------------------------------------
# Top-N ranking
# ---------------------------------------------------------------------------

def rank(values: Iterable[str], empty_label: str = UNKNOWN, *, skip_empty: bool = False) -> list[RankEntry]:
    """Count category values and order them by descending count.

    Empty values are tallied under ``empty_label`` unless ``skip_empty``.
    """
    if skip_empty:
        labels = (v for v in values if v)
    else:
        labels = (v or empty_label for v in values)
    counts = Counter(labels)
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return [RankEntry(name=name, value=count) for name, count in ordered]


def top_n(entries: Sequence[RankEntry], n: int) -> list[RankEntry]:
    return list(entries[: max(0, n)])


def issue_ranking(records: Iterable[Ticket]) -> list[RankEntry]:
    """Rank individual issue tokens; empty issue lists count as "Unspecified"."""
    return rank(token for r in records for token in tokenize(r.issue_list))


def customer_ranking(records: Iterable[Ticket]) -> list[RankEntry]:
    return rank(r.company_name for r in records)


def product_ranking(records: Iterable[Ticket]) -> list[RankEntry]:
    return rank(r.product for r in records)


def app_type_ranking(records: Iterable[FuelTicket]) -> list[RankEntry]:
    return rank(r.app_type for r in records)


def vendor_ranking(records: Iterable[SupportTicket]) -> list[RankEntry]:
    return rank(r.du_vendor for r in records)


def fcc_reason_ranking(records: Iterable[SupportTicket]) -> list[RankEntry]:
    """Only tickets that name a reason take part; most tickets have a working FCC."""
    return rank((r.reason_fcc_not_working for r in records), skip_empty=True)


def hardware_version_ranking(records: Iterable[SupportTicket]) -> list[RankEntry]:
    return rank(r.hardware_version for r in records)


def severity_ranking(records: Iterable[SupportTicket]) -> list[RankEntry]:
    return rank((r.issue_buckets for r in records), UNSPECIFIED)


def layer_breakdown(records: Iterable[Ticket]) -> list[RankEntry]:
    """Token count per TechLayer, in TechLayer declaration order (zeros included)."""
    counts = Counter(classify(token) for r in records for token in tokenize(r.issue_list))
    return [RankEntry(name=layer.value, value=counts.get(layer, 0)) for layer in TechLayer]


# ---------------------------------------------------------------------------
# Time-bucketed trend
# ---------------------------------------------------------------------------

def _month_bucket(acc: dict[tuple[int, int], tuple[int, frozenset[str]]], record: Ticket):
    started = parse_timestamp(record.start_time)
    if started is None:
        return acc
    key = (started.year, started.month)
    total, companies = acc.get(key, (0, frozenset()))
    return {
        **acc,
        key: (total + len(tokenize(record.issue_list)), companies | {record.company_name or UNKNOWN}),
    }


def monthly_trend(records: Iterable[Ticket]) -> list[TrendPoint]:
    """Average split-issue count per distinct customer for each calendar month.

    Records without a start time are left out of this view only.
    """
    buckets = reduce(_month_bucket, records, {})
    points: list[TrendPoint] = []
    for (year, month) in sorted(buckets):
        total, companies = buckets[(year, month)]
        unique = len(companies)
        label = datetime(year, month, 1).strftime(TREND_LABEL_FORMAT)
        points.append(
            TrendPoint(
                label=label,
                avg=total / unique if unique else 0.0,
                total_issues=total,
                unique_customers=unique,
            )
        )
    return points


# ---------------------------------------------------------------------------
# Repeat failures
# ---------------------------------------------------------------------------

def repeat_failures(records: Iterable[Ticket], limit: int = 5) -> list[RepeatFailure]:
    """(company, issue token) pairs seen more than once, most frequent first.

    A token repeated inside one ticket's issue list counts once per repetition;
    ``ids`` lists each contributing ticket once.
    """
    occurrences = [
        ((r.company_name or UNKNOWN, token), r.id)
        for r in records
        for token in tokenize(r.issue_list)
    ]
    counts = Counter(key for key, _ in occurrences)
    ids: dict[tuple[str, str], list[str]] = {}
    for key, record_id in occurrences:
        seen = ids.setdefault(key, [])
        if record_id not in seen:
            seen.append(record_id)
    repeated = sorted(((key, n) for key, n in counts.items() if n > 1), key=lambda item: -item[1])
    return [
        RepeatFailure(company=company, issue=issue, count=n, ids=tuple(ids[(company, issue)]))
        for (company, issue), n in repeated[: max(0, limit)]
    ]


# ---------------------------------------------------------------------------
# Calibration variance
# ---------------------------------------------------------------------------

def calibration_checks(
    records: Iterable[SupportTicket], threshold: float = DEFAULT_CALIBRATION_THRESHOLD
) -> list[CalibrationCheck]:
    """Compare manual dip and app readings for tickets carrying both.

    A zero manual reading leaves the ratio undefined, and a zero app reading
    means the value was missing; both are excluded rather than flagged.
    """
    checks: list[CalibrationCheck] = []
    for r in records:
        if not r.manual_dip_level or not r.app_fuel_level:
            continue
        variance = abs(r.manual_dip_level - r.app_fuel_level)
        ratio = variance / r.manual_dip_level
        checks.append(
            CalibrationCheck(
                id=r.id,
                company=r.company_name,
                manual=r.manual_dip_level,
                app=r.app_fuel_level,
                variance=variance,
                ratio=ratio,
                anomalous=ratio > threshold,
            )
        )
    return checks


def calibration_alerts(
    records: Iterable[SupportTicket], threshold: float = DEFAULT_CALIBRATION_THRESHOLD
) -> list[CalibrationCheck]:
    return [c for c in calibration_checks(records, threshold) if c.anomalous]


# ---------------------------------------------------------------------------
# Daily rate and overviews
# ---------------------------------------------------------------------------

def average_daily_count(records: Sequence[Ticket]) -> float:
    """Split-issue tokens per distinct calendar day that has at least one dated ticket."""
    days = {ts.date() for ts in (parse_timestamp(r.start_time) for r in records) if ts is not None}
    if not days:
        return 0.0
    total = sum(len(tokenize(r.issue_list)) for r in records)
    return total / len(days)


def _count(records: Iterable[Ticket], predicate: Callable[[Ticket], bool]) -> int:
    return sum(1 for r in records if predicate(r))


def fuel_overview(records: Sequence[FuelTicket], top: int = 3) -> FuelOverview:
    total = len(records)
    resolved = _count(records, lambda r: r.status is TicketStatus.RESOLVED)
    issues = issue_ranking(records)
    customers = customer_ranking(records)
    lead_issue = issues[0] if issues else RankEntry(name="None", value=0)
    lead_customer = customers[0] if customers else RankEntry(name="None", value=0)
    return FuelOverview(
        total=total,
        resolved=resolved,
        pending=total - resolved,
        resolved_rate=round(resolved / total * 100) if total else 0,
        top_issue=lead_issue.name,
        top_issue_count=lead_issue.value,
        top_customer=lead_customer.name,
        top_customer_count=lead_customer.value,
        top_issues=tuple(top_n(issues, top)),
        top_customers=tuple(top_n(customers, top)),
    )


def support_overview(
    records: Sequence[SupportTicket], threshold: float = DEFAULT_CALIBRATION_THRESHOLD
) -> SupportOverview:
    return SupportOverview(
        total=len(records),
        in_warranty=_count(records, lambda r: r.warranty_status == "In Warranty"),
        amc=_count(records, lambda r: r.warranty_status == "AMC"),
        critical=_count(records, lambda r: r.issue_buckets == "Critical"),
        calibration_alerts=len(calibration_alerts(records, threshold)),
    )
