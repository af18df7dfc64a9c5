from __future__ import annotations

import logging
from io import StringIO

import pytest

import ticket_analytics.logging.init as log_init
from ticket_analytics.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
    source_logger,
)


@pytest.fixture(autouse=True)
def _fresh_logger():
    log_init.reset_logging()
    yield
    log_init.reset_logging()


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)


def test_logging_labeled_prefixes():
    """Every level maps to one of INFO|WARN|ERROR|SUMMARY."""
    out = StringIO()
    logger = setup_logging(stream=out)

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")
    logger.debug("hidden at the default level")

    assert out.getvalue().splitlines() == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_debug_switch_on_later_call():
    out = StringIO()
    logger = setup_logging(stream=out)
    logger.debug("before")
    setup_logging(debug=True)
    logger.debug("after")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert out.getvalue().splitlines() == ["DEBUG debug mode enabled", "DEBUG after"]


def test_get_logger_sets_up_lazily():
    logger = get_logger()
    assert logger is setup_logging()
    assert logger.name == LOGGER_NAME


def test_module_loggers_share_the_package_handler(capsys):
    setup_logging()
    logging.getLogger("ticket_analytics.services.filters").warning("ignoring bound")
    assert capsys.readouterr().out == "WARN ignoring bound\n"


def test_source_logger_prefixes_file_name():
    out = StringIO()
    setup_logging(stream=out)
    source_logger("fuel.xlsx").error("no records found in fuel.xlsx")
    assert out.getvalue() == "ERROR fuel.xlsx: no records found in fuel.xlsx\n"


@pytest.mark.parametrize(
    "line",
    [
        "SUMMARY files=1/1 success=1 failed=0 records=3 matched=3 elapsed_sec=0.1",
        "files=1/1 success=1 failed=0 records=3 matched=3 elapsed_sec=0.1",
    ],
)
def test_log_summary_labels_once(capsys, line):
    setup_logging()
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"
    log_summary(line)
    out = capsys.readouterr().out
    assert out == "SUMMARY files=1/1 success=1 failed=0 records=3 matched=3 elapsed_sec=0.1\n"
