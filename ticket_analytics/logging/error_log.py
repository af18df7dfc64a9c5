from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ticket_analytics.excel.reader import IngestError, ParseError
from ticket_analytics.models.error_record import ErrorRecord
from ticket_analytics.models.tickets import TicketKind
from ticket_analytics.services.ingest import EmptyResultError

"""Error log for sources rejected during a CLI run.

Only structural ingest failures end up here (per-field problems are
defaulted by the normalizer and never reported). Each rejected file becomes
one JSON line naming the file, the ticket kind it was read as, and the
failure tier:

- PARSE_ERROR   the file could not be read as a table
- EMPTY_RESULT  the file was readable but produced no records
- INGEST_ERROR  any other IngestError subclass

The log file ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC) is only created when
there is something to write.
"""

__all__ = [
    "ERROR_TYPES",
    "ErrorLogBuffer",
    "error_type_for",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"

# Most specific first
ERROR_TYPES: tuple[tuple[type[IngestError], str], ...] = (
    (EmptyResultError, "EMPTY_RESULT"),
    (ParseError, "PARSE_ERROR"),
)
FALLBACK_ERROR_TYPE = "INGEST_ERROR"


def error_type_for(exc: IngestError) -> str:
    for exc_type, name in ERROR_TYPES:
        if isinstance(exc, exc_type):
            return name
    return FALLBACK_ERROR_TYPE


class ErrorLogBuffer:
    """Collects rejected sources during a run; flush() writes them as JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def failed_sources(self) -> list[str]:
        return [r.file for r in self._records]

    def record_failure(self, source: str, kind: TicketKind, exc: IngestError) -> ErrorRecord:
        """Buffer one rejected source; returns the record that will be written."""
        record = ErrorRecord.create(source, kind.value, error_type_for(exc), str(exc))
        self._records.append(record)
        return record

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the run's log file; None when nothing failed."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            f.writelines(r.to_json_line() + "\n" for r in self._records)
        self._records.clear()
        return fp
