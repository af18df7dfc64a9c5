from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ticket_analytics.excel.coerce import coerce_date, coerce_number, format_iso, parse_timestamp


def test_serial_epoch_round_trip():
    assert coerce_date(25569) == "1970-01-01T00:00:00.000Z"
    assert coerce_date(25569.0) == "1970-01-01T00:00:00.000Z"


def test_serial_with_fraction_of_day():
    # 45292 = 2024-01-01, .5 = noon
    assert coerce_date(45292.5) == "2024-01-01T12:00:00.000Z"


def test_numeric_text_is_read_as_serial():
    assert coerce_date("25569") == "1970-01-01T00:00:00.000Z"
    assert coerce_date(" 45292.25 ") == "2024-01-01T06:00:00.000Z"


def test_date_string_parsed_as_utc():
    assert coerce_date("2024-01-05 10:00:00") == "2024-01-05T10:00:00.000Z"
    assert coerce_date("2024-01-05") == "2024-01-05T00:00:00.000Z"


def test_date_string_with_offset_converted_to_utc():
    assert coerce_date("2024-01-05T10:00:00+05:30") == "2024-01-05T04:30:00.000Z"


@pytest.mark.parametrize("value", ["", "   ", "not a date", "N/A", None, True, "today", float("nan")])
def test_unparseable_dates_are_empty(value):
    assert coerce_date(value) == ""


def test_huge_serial_fails_soft():
    assert coerce_date(1e20) == ""


@pytest.mark.parametrize(
    "value, expected",
    [
        ("120 Litres", 120.0),
        ("₹450", 450.0),
        ("12.5 L", 12.5),
        ("1,250", 1250.0),
        ("1.2.3", 1.2),
        (".5", 0.5),
        ("", 0.0),
        ("abc", 0.0),
        (".", 0.0),
        (None, 0.0),
        (42, 42.0),
    ],
)
def test_coerce_number(value, expected):
    assert coerce_number(value) == expected


def test_coerce_number_never_negative_or_infinite():
    assert coerce_number("-5") == 5.0
    assert coerce_number(float("inf")) == 0.0
    assert coerce_number("9" * 400 + " L") == 0.0


def test_parse_timestamp():
    assert parse_timestamp("1970-01-01T00:00:00.000Z") == datetime(1970, 1, 1, tzinfo=UTC)
    assert parse_timestamp("2024-02-03") == datetime(2024, 2, 3, tzinfo=UTC)
    assert parse_timestamp("") is None
    assert parse_timestamp("garbage") is None


def test_format_iso_pads_milliseconds():
    dt = datetime(2024, 1, 2, 3, 4, 5, 7000, tzinfo=UTC)
    assert format_iso(dt) == "2024-01-02T03:04:05.007Z"


@pytest.mark.parametrize("value", ["1500-01-01", "2500-06-01", "0001-01-01"])
def test_dates_outside_calendar_window_are_empty(value):
    assert coerce_date(value) == ""


def test_date_without_year_never_raises():
    # older pandas fills in the current year, newer pandas year 1
    result = coerce_date("5 Jan")
    assert result == "" or result.endswith("-01-05T00:00:00.000Z")


def test_bare_year_text_is_a_year_not_a_serial():
    assert coerce_date("2024") == "2024-01-01T00:00:00.000Z"
    assert coerce_date("1899") == "1905-03-13T00:00:00.000Z"
