from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from seo_dedupe.models.error_record import ErrorRecord

"""JSON Lines log of field generations that fell back to the original text.

Records stay in memory during a run and are appended to
`<logs_dir>/errors-YYYYMMDD-HHMMSS.log` (UTC) on flush(). The file is named
on the first non-empty flush, so a clean run leaves nothing behind.
"""

DEFAULT_LOGS_DIR = Path("./logs")


class ErrorLogBuffer:
    """Pending ErrorRecords for one run plus the file they end up in.

    Only touched from the event loop thread.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else DEFAULT_LOGS_DIR
        self.path: Path | None = None
        self._pending: list[ErrorRecord] = []

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def records(self) -> tuple[ErrorRecord, ...]:
        return tuple(self._pending)

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def counts_by_type(self) -> Counter[str]:
        """Pending records per error_type, e.g. {"GENERATION_ERROR": 2}."""
        return Counter(r.error_type for r in self._pending)

    def _target(self) -> Path:
        if self.path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self.path = self.logs_dir / f"errors-{datetime.now(UTC):%Y%m%d-%H%M%S}.log"
        return self.path

    def flush(self) -> Path | None:
        """Append pending records; returns the file, or None if nothing was pending."""
        if not self._pending:
            return None
        target = self._target()
        payload = "".join(f"{r.to_json_line()}\n" for r in self._pending)
        with target.open("a", encoding="utf-8") as f:
            f.write(payload)
        self._pending.clear()
        return target
