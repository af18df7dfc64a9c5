from __future__ import annotations

import os
from pathlib import Path

import pytest

from ticket_analytics.cli import main as cli_main
from ticket_analytics.logging.init import reset_logging

"""End-to-end CLI runs over real workbooks (openpyxl written, pandas read)."""


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


def test_fuel_report(fuel_workbook: Path, capsys):
    code = cli_main([str(fuel_workbook), "--kind", "fuel"])
    out = capsys.readouterr().out

    assert code == 0
    assert "INFO fuel.xlsx: 4/4 records (fuel)" in out
    assert "INFO   resolved=2 pending=2 resolved_rate=50%" in out
    assert "INFO   top issue: Bluetooth Issue (2)" in out
    assert "INFO   trend Jan 24: avg=3 issues=3 customers=1" in out
    assert "INFO   trend Feb 24: avg=1 issues=1 customers=1" in out
    assert "SUMMARY files=1/1 success=1 failed=0 records=4 matched=4" in out
    assert not (Path("logs")).exists()


def test_after_sales_report_with_config(after_sales_workbook: Path, write_config: Path, capsys):
    code = cli_main([str(after_sales_workbook), "--kind", "after-sales", "--config", str(write_config)])
    out = capsys.readouterr().out

    assert code == 0
    assert "INFO   in_warranty=1 amc=1 critical=1 calibration_alerts=1" in out
    assert "INFO   calibration: AS-1 manual=100 app=94 variance=6%" in out
    assert "INFO   repeat: Acme Co / Sensor Fail x3 [AS-1, AS-2, AS-3]" in out


def test_date_filter_and_search(fuel_workbook: Path, capsys):
    code = cli_main(
        [str(fuel_workbook), "--kind", "fuel", "--from", "2024-01-01", "--to", "2024-01-31", "--search", "gujarat"]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO fuel.xlsx: 1/4 records (fuel)" in out
    assert "records=4 matched=1" in out


def test_config_from_env_file(after_sales_workbook: Path, temp_workdir: Path, monkeypatch, capsys):
    monkeypatch.delenv("TICKET_ANALYTICS_CONFIG", raising=False)
    cfg = temp_workdir / "config" / "strict.yml"
    cfg.write_text("calibration_threshold: 0.02\n", encoding="utf-8")
    (temp_workdir / ".env").write_text(f"TICKET_ANALYTICS_CONFIG={cfg}\n", encoding="utf-8")
    try:
        code = cli_main([str(after_sales_workbook), "--kind", "after-sales"])
    finally:
        # load_dotenv writes into os.environ directly; pop it outside monkeypatch
        # so teardown does not restore the value into later tests
        os.environ.pop("TICKET_ANALYTICS_CONFIG", None)
    out = capsys.readouterr().out
    assert code == 0
    assert "calibration_alerts=2" in out


def test_debug_mode(fuel_workbook: Path, capsys):
    code = cli_main([str(fuel_workbook), "--kind", "fuel", "--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG ingested 4 fuel records from fuel.xlsx" in out


def test_inspect_data(fuel_workbook: Path, capsys):
    code = cli_main([str(fuel_workbook), "--kind", "fuel", "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: fuel.xlsx" in out
    assert "SHEET: Sheet1" in out
    assert "SUMMARY" not in out
