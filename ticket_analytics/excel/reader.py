from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Workbook reader: first worksheet -> list of RawRow.

The first row is the header; every cell is read as text so that nothing is
silently coerced before the normalizer sees it. Blank cells are left out of
the row mapping (the same shape a spreadsheet-to-JSON export produces), and
rows that are entirely blank are skipped.

Anything that cannot be read as a table at all raises ParseError; that is the
only failure this module reports.
"""

__all__ = [
    "IngestError",
    "ParseError",
    "SheetData",
    "SUPPORTED_SUFFIXES",
    "read_sheet",
    "read_rows",
]

SUPPORTED_SUFFIXES = (".xlsx", ".xls", ".csv")


class IngestError(Exception):
    """Base class for failures that reject a whole source."""


class ParseError(IngestError):
    """Raised when a source cannot be parsed as tabular data."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # header -> cell text


def _load_frame(path: Path) -> tuple[str, pd.DataFrame]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return path.stem, pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    xls = pd.ExcelFile(path)
    if not xls.sheet_names:
        raise ParseError(f"workbook '{path.name}' has no worksheets")
    first = xls.sheet_names[0]
    return str(first), xls.parse(first, dtype=str, keep_default_na=False, na_values=[""])


def read_sheet(path: Path) -> SheetData:
    """Read the first worksheet of ``path`` keeping header names and text cells."""
    path = Path(path)
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ParseError(f"unsupported file type '{path.suffix}' (expected .xlsx, .xls or .csv)")
    if not path.is_file():
        raise ParseError(f"file not found: {path}")
    try:
        sheet_name, df = _load_frame(path)
    except ParseError:
        raise
    except Exception as e:
        # pandas / openpyxl / xlrd raise a wide variety of types for corrupt input
        raise ParseError(f"cannot read '{path.name}' as a table: {e}") from e

    columns = [str(c).strip() for c in df.columns]
    rows: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        row_dict: dict[str, Any] = {}
        for col, val in zip(columns, raw, strict=False):
            if val is None or pd.isna(val):
                continue
            row_dict[col] = val
        if row_dict:
            rows.append(row_dict)
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def read_rows(path: Path) -> list[dict[str, Any]]:
    """Convenience wrapper returning only the rows of the first worksheet."""
    return read_sheet(path).rows
