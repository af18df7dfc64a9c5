# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def fuel_rows() -> list[dict[str, str]]:
    """Rows shaped like a fuel-issue export (header variants included)."""
    return [
        {
            "Id": "F-1",
            "Start time": "2024-01-05 10:00:00",
            "Completion time": "2024-01-06 09:30:00",
            "Name": "Ravi",
            "Company Name": "Acme Co",
            "State": "Maharashtra",
            "Fuel Team SPOC": "Priya",
            "Product": "Jerry Can",
            "Customer/Partner Reported Issue": "Finish button not working",
            "Issue(s) List": "Finish Button Disabled; Bluetooth Issue",
            "Facing Issue with which app?": "Operator App",
        },
        {
            "Id": "F-2",
            "Start time": "2024-01-20 08:15:00",
            "Name": "Meena",
            "Company Name": "Acme Co",
            "State": "Gujarat",
            "Fuel Team SPOC": "Arjun",
            "Product": "Bowser",
            "Issue(s) List": "Bluetooth Issue",
            "Facing Issue with which app?": "Customer App",
        },
        {
            "Id": "F-3",
            "Start time": "2024-02-02 12:00:00",
            "Completion time": "2024-02-02 18:00:00",
            "Company Name": "Fuelco",
            "Product": "Bowser",
            "Issue(s) List": "ATG sensor battery drain",
        },
        {
            # no id, no start time
            "Company Name": "Fuelco",
            "Product": "Jerry Can",
        },
    ]


@pytest.fixture()
def after_sales_rows() -> list[dict[str, str]]:
    return [
        {
            "ID": "AS-1",
            "Start time": "2024-03-01 09:00:00",
            "Company Name": "Acme Co",
            "In Warranty or AMC?": "In Warranty",
            "Issue Buckets": "Critical",
            "RATG Hardware Version Installed": "v2",
            "Issue(s) List": "Sensor Fail",
            "RATG - Fuel Level as reported by Manual Dip": "100 Litres",
            "RATG - Fuel Level as visible in the App": "94",
            "DU Vendor": "Tokheim",
            "Reasons for FCC Not Working": "Power failure",
        },
        {
            "ID": "AS-2",
            "Start time": "2024-03-15 09:00:00",
            "Company Name": "Acme Co",
            "In Warranty or AMC?": "AMC",
            "Issue Buckets": "Minor",
            "Issue(s) List": "Sensor Fail; Network offline",
            "RATG - Fuel Level as reported by Manual Dip": "100",
            "RATG - Fuel Level as visible in the App": "97",
        },
        {
            "ID": "AS-3",
            "Company Name": "Acme Co",
            "Issue(s) List": "Sensor Fail",
        },
    ]


def write_workbook(path: Path, rows: list[dict[str, object]], sheet_name: str = "Sheet1") -> Path:
    df = pd.DataFrame(rows)
    with pd.ExcelWriter(path) as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    return path


@pytest.fixture()
def fuel_workbook(temp_workdir: Path, fuel_rows) -> Path:
    return write_workbook(temp_workdir / "data" / "fuel.xlsx", fuel_rows)


@pytest.fixture()
def after_sales_workbook(temp_workdir: Path, after_sales_rows) -> Path:
    return write_workbook(temp_workdir / "data" / "after_sales.xlsx", after_sales_rows)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """header_aliases:
  fuel:
    company_name: [Client]
  after_sales:
    du_vendor: [Dispenser Make]
calibration_threshold: 0.04
top_n: 2
repeat_limit: 3
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "analytics.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
