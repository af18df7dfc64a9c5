from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Aggregate view models returned by the aggregation engine.

Every view is a frozen dataclass built fresh per call; nothing here is cached
or mutated after construction. ``to_dict`` yields the plain structure handed to
presentation code (camelCase keys where a chart consumer expects them).
"""

__all__ = [
    "TechLayer",
    "RankEntry",
    "TrendPoint",
    "RepeatFailure",
    "CalibrationCheck",
    "FuelOverview",
    "SupportOverview",
]


class TechLayer(Enum):
    """Technology layer an issue token is attributed to."""
    APP = "App"
    HARDWARE = "Hardware"
    CONNECTIVITY = "Connectivity"
    DATA_SYNC = "DataSync"
    OTHER = "Other"


@dataclass(frozen=True)
class RankEntry:
    name: str
    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class TrendPoint:
    """Monthly trend bucket: issues per distinct customer."""
    label: str  # e.g. "Jan 24"
    avg: float
    total_issues: int
    unique_customers: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "avg": self.avg,
            "totalIssues": self.total_issues,
            "uniqueCustomers": self.unique_customers,
        }


@dataclass(frozen=True)
class RepeatFailure:
    company: str
    issue: str
    count: int
    ids: tuple[str, ...] = ()  # source record ids for drill-down

    def to_dict(self) -> dict[str, Any]:
        return {"company": self.company, "issue": self.issue, "count": self.count, "ids": list(self.ids)}


@dataclass(frozen=True)
class CalibrationCheck:
    """Manual dip vs app reading comparison for one after-sales ticket."""
    id: str
    company: str
    manual: float
    app: float
    variance: float
    ratio: float
    anomalous: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "company": self.company,
            "manual": self.manual,
            "app": self.app,
            "variance": self.variance,
            "ratio": self.ratio,
            "anomalous": self.anomalous,
        }


@dataclass(frozen=True)
class FuelOverview:
    total: int
    resolved: int
    pending: int
    resolved_rate: int  # whole percent
    top_issue: str
    top_issue_count: int
    top_customer: str
    top_customer_count: int
    top_issues: tuple[RankEntry, ...] = field(default_factory=tuple)
    top_customers: tuple[RankEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SupportOverview:
    total: int
    in_warranty: int
    amc: int
    critical: int
    calibration_alerts: int
