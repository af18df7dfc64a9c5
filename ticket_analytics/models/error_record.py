from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for structural ingest failures.

Per-field problems (an unresolved header, an unparseable date) never produce an
ErrorRecord; they are defaulted silently by the normalizer. Only failures that
reject a whole source (ParseError, EmptyResultError) are recorded here and
written as JSON Lines by ``ticket_analytics.logging.error_log``.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: source file name
        kind: ticket kind requested for the source ("fuel" / "after-sales")
        error_type: error classification in UPPER_SNAKE_CASE (PARSE_ERROR, EMPTY_RESULT)
        message: human readable reason
    """
    timestamp: str
    file: str
    kind: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, kind: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            kind=kind,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line with the fixed key set."""
        return json.dumps(asdict(self), ensure_ascii=False)
