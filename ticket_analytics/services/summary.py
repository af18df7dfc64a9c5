from __future__ import annotations

from ..models.aggregates import FuelOverview, RankEntry
from ..models.ingest_result import DashboardReport, RunSummary

"""Report line rendering for the CLI.

render_summary_line produces the single machine-readable SUMMARY line:

    SUMMARY files={n}/{n} success={s} failed={f} records={r} matched={m} elapsed_sec={e}

render_report_lines produces the human readable per-file overview (logged at
INFO level by the CLI).
"""


def _format_number(value: float) -> str:
    """Integers without decimals, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    rounded = round(value, 3)
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)


def render_summary_line(total_files: int, summary: RunSummary) -> str:
    """Render the SUMMARY line.

    Examples:
        >>> s = RunSummary(success_files=1, failed_files=0, total_records=45,
        ...                matched_records=30, elapsed_seconds=2.0)
        >>> render_summary_line(1, s)
        'SUMMARY files=1/1 success=1 failed=0 records=45 matched=30 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={summary.success_files} "
        f"failed={summary.failed_files} "
        f"records={summary.total_records} "
        f"matched={summary.matched_records} "
        f"elapsed_sec={_format_number(summary.elapsed_seconds)}"
    )


def _ranking(entries: tuple[RankEntry, ...]) -> str:
    if not entries:
        return "-"
    return ", ".join(f"{e.name} ({e.value})" for e in entries)


def render_report_lines(report: DashboardReport) -> list[str]:
    lines = [f"{report.source}: {report.matched_records}/{report.total_records} records ({report.kind.value})"]
    overview = report.overview
    if isinstance(overview, FuelOverview):
        lines.append(
            f"  resolved={overview.resolved} pending={overview.pending} resolved_rate={overview.resolved_rate}%"
        )
        lines.append(f"  top issue: {overview.top_issue} ({overview.top_issue_count})")
        lines.append(f"  top customer: {overview.top_customer} ({overview.top_customer_count})")
    else:
        lines.append(
            f"  in_warranty={overview.in_warranty} amc={overview.amc} critical={overview.critical} "
            f"calibration_alerts={overview.calibration_alerts}"
        )
    for name, entries in report.rankings.items():
        lines.append(f"  {name}: {_ranking(entries)}")
    lines.append(f"  layers: {_ranking(report.layer_breakdown)}")
    lines.append(f"  avg daily issues: {_format_number(report.average_daily)}")
    for point in report.trend:
        lines.append(
            f"  trend {point.label}: avg={_format_number(point.avg)} "
            f"issues={point.total_issues} customers={point.unique_customers}"
        )
    for repeat in report.repeat_failures:
        lines.append(f"  repeat: {repeat.company} / {repeat.issue} x{repeat.count} [{', '.join(repeat.ids)}]")
    for check in report.calibration_flags:
        lines.append(
            f"  calibration: {check.id} manual={_format_number(check.manual)} "
            f"app={_format_number(check.app)} variance={_format_number(check.ratio * 100)}%"
        )
    return lines
