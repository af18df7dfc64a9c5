from __future__ import annotations

import math
import re
import warnings
from datetime import UTC, datetime, timedelta
from typing import Any

import pandas as pd
from pandas.errors import OutOfBoundsDatetime

from .resolver import cell_text

"""Fail-soft type coercers for spreadsheet cells.

- coerce_date: spreadsheet serial or free-form date text -> ISO-8601 UTC string
- coerce_number: noisy numeric text ("120 Litres", "₹450") -> float
- parse_timestamp: ISO string produced by coerce_date -> aware datetime

None of these raise on bad input: dates fall back to "" and numbers to 0.0.
"""

__all__ = [
    "SERIAL_UNIX_EPOCH",
    "TEXT_YEAR_MIN",
    "TEXT_YEAR_MAX",
    "coerce_date",
    "coerce_number",
    "format_iso",
    "parse_timestamp",
]

# Serial day number of 1970-01-01 in the 1899-12-30 based spreadsheet calendar
SERIAL_UNIX_EPOCH = 25569
SECONDS_PER_DAY = 86400

# Calendar window accepted for dates typed as text
TEXT_YEAR_MIN = 1900
TEXT_YEAR_MAX = 2100

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_SERIAL_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
# Relative keywords pandas would happily resolve against the wall clock
_RELATIVE_WORDS = {"now", "today", "tomorrow", "yesterday"}


def format_iso(dt: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    dt = dt.astimezone(UTC)
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}.{dt.microsecond // 1000:03d}Z"
    )


def _from_epoch_ms(ms: int) -> str:
    try:
        return format_iso(_UNIX_EPOCH + timedelta(milliseconds=ms))
    except OverflowError:
        return ""


def _serial_to_iso(serial: float) -> str:
    if not math.isfinite(serial):
        return ""
    # half-up rounding to the millisecond
    ms = math.floor((serial - SERIAL_UNIX_EPOCH) * SECONDS_PER_DAY * 1000 + 0.5)
    return _from_epoch_ms(ms)


def _text_to_iso(text: str) -> str:
    if text.lower() in _RELATIVE_WORDS:
        return ""
    try:
        with warnings.catch_warnings():
            # format inference and nanosecond-truncation warnings are noise here
            warnings.simplefilter("ignore")
            ts = pd.to_datetime(text, utc=True, errors="coerce")
            if ts is None or pd.isna(ts):
                return ""
            parsed = ts.to_pydatetime()
    except (OutOfBoundsDatetime, ValueError, TypeError, OverflowError):
        return ""
    # a date typed without a year can come back as year 1
    if not TEXT_YEAR_MIN <= parsed.year <= TEXT_YEAR_MAX:
        return ""
    return format_iso(parsed)


def _looks_like_year(text: str) -> bool:
    return len(text) == 4 and text.isdigit() and TEXT_YEAR_MIN <= int(text) <= TEXT_YEAR_MAX


def coerce_date(value: Any) -> str:
    """Convert a spreadsheet serial or date string to ISO-8601; "" when unparseable.

    Purely numeric text ("45292" / "45292.5") is read as a serial, since the
    reader hands every cell over as text. The exception is a bare four digit
    year in the accepted range ("2024"), which reads as January 1st of that
    year. Text dates outside TEXT_YEAR_MIN..TEXT_YEAR_MAX are rejected.
    """
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return _serial_to_iso(float(value))
    if isinstance(value, datetime):
        aware = value if value.tzinfo else value.replace(tzinfo=UTC)
        return format_iso(aware)
    text = cell_text(value).strip()
    if not text:
        return ""
    if _SERIAL_RE.match(text) and not _looks_like_year(text):
        return _serial_to_iso(float(text))
    return _text_to_iso(text)


def coerce_number(value: Any) -> float:
    """Parse the leading decimal number out of noisy text; 0.0 when none.

    Every character other than digits and '.' is dropped first, so signs are
    dropped too ("-5" reads as 5.0).
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, float):
        return abs(value) if math.isfinite(value) else 0.0
    cleaned = _NON_NUMERIC_RE.sub("", cell_text(value))
    match = _NUMBER_RE.match(cleaned)
    if match is None:
        return 0.0
    number = float(match.group())
    return number if math.isfinite(number) else 0.0


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 string into an aware UTC datetime; None when empty/invalid."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
