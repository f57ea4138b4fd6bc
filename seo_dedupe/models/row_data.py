from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""AnnotatedRow model.

An AnnotatedRow is the detector's read-only view of one input row: the original
values plus the ordered list of fields that were classified as duplicates.
The input mapping itself is never mutated; output records are fresh dicts.
"""

__all__ = [
    "AnnotatedRow",
    "DUPLICATE_COLUMN",
    "DUPLICATE_FIELDS_COLUMN",
]

DUPLICATE_COLUMN = "duplicate"
DUPLICATE_FIELDS_COLUMN = "duplicateFields"


@dataclass(frozen=True)
class AnnotatedRow:
    """One input row after duplicate classification.

    row_number is the 1-based position in the cleaned (empty rows dropped)
    sequence, used for error reporting only.
    """
    row_number: int
    values: dict[str, Any]  # Column name -> original value (untouched)
    duplicate_fields: tuple[str, ...] = ()  # Order = field iteration order of the row

    @property
    def is_duplicate(self) -> bool:
        return bool(self.duplicate_fields)

    def get(self, column: str, default: Any = "") -> Any:
        return self.values.get(column, default)

    def to_record(self) -> dict[str, Any]:
        """Return the annotated output mapping (input columns + flag columns)."""
        record = dict(self.values)
        record[DUPLICATE_COLUMN] = "true" if self.is_duplicate else "false"
        record[DUPLICATE_FIELDS_COLUMN] = ",".join(self.duplicate_fields)
        return record
