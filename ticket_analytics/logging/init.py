from __future__ import annotations

import logging
import sys
from typing import IO, Any

"""Report logging for the ticket-analytics CLI.

The CLI's whole output is its log: per-file report lines at INFO, rejected
sources at ERROR, and one machine-readable SUMMARY line at the end. Every line
starts with its label (INFO|WARN|ERROR|SUMMARY, DEBUG with --debug) so runs can
be grepped or diffed.

Library modules never configure logging; they log through
``logging.getLogger(__name__)`` below the ``ticket_analytics`` logger and pick
up whatever setup_logging() installed.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "SourceAdapter",
    "setup_logging",
    "get_logger",
    "source_logger",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "ticket_analytics"

# Between INFO (20) and WARNING (30): shown at the default level, never filtered by --debug
SUMMARY_LEVEL = 25
SUMMARY_LABEL = "SUMMARY"

_logger: logging.Logger | None = None
_handler: logging.Handler | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message``; WARNING is shortened to WARN."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: SUMMARY_LABEL,
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


class SourceAdapter(logging.LoggerAdapter):
    """Prefixes messages with the source (file) they are about: ``fuel.xlsx: ...``."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"{self.extra['source']}: {msg}", kwargs


def setup_logging(debug: bool = False, stream: IO[str] | None = None) -> logging.Logger:
    """Install the labeled stdout handler on the package logger.

    The handler is created once per process (until reset_logging()); later
    calls only switch the level, so the CLI can set up logging before parsing
    arguments and turn on ``debug`` afterwards.
    """
    global _logger, _handler

    level = logging.DEBUG if debug else logging.INFO

    if _logger is None:
        logging.addLevelName(SUMMARY_LEVEL, SUMMARY_LABEL)
        logger = logging.getLogger(LOGGER_NAME)
        for old in logger.handlers[:]:
            logger.removeHandler(old)

        _handler = logging.StreamHandler(stream or sys.stdout)
        _handler.setFormatter(LabeledFormatter())
        logger.addHandler(_handler)
        # report lines must not be duplicated by a root handler
        logger.propagate = False
        _logger = logger

    _logger.setLevel(level)
    if _handler is not None:
        _handler.setLevel(level)
    if debug:
        _logger.debug("debug mode enabled")
    return _logger


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def source_logger(source: str) -> SourceAdapter:
    """Logger whose messages are attributed to one input file."""
    return SourceAdapter(get_logger(), {"source": source})


def log_summary(line: str) -> None:
    """Log the rendered SUMMARY line.

    The formatter supplies the label, so a leading ``SUMMARY `` in ``line``
    (as produced by render_summary_line) is dropped instead of doubled.
    """
    prefix = f"{SUMMARY_LABEL} "
    if line.startswith(prefix):
        line = line[len(prefix):]
    get_logger().log(SUMMARY_LEVEL, line)


def reset_logging() -> None:
    """Forget the installed handler; the next setup_logging() binds the current stdout."""
    global _logger, _handler
    if _logger is not None and _handler is not None:
        _logger.removeHandler(_handler)
    _logger = None
    _handler = None
