from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

"""ErrorRecord model for the per-field generation error log.

Generation failures never stop a run; each one is recorded here and flushed
as JSON Lines at the end of the run (see seo_dedupe.logging.error_log).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        row_id: Value of the row identifier column (stringified)
        field: Field whose generation failed
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error description
    """
    timestamp: str  # ISO8601 UTC
    row_id: str
    field: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(row_id: Any, field: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            row_id=str(row_id),
            field=field,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict; no extra keys
        return json.dumps(asdict(self), ensure_ascii=False)
