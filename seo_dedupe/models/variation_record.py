from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .row_data import DUPLICATE_COLUMN, DUPLICATE_FIELDS_COLUMN

"""VariationRecord model.

One VariationRecord is produced per duplicate row by the batch orchestrator.
It carries the pass-through identity columns, the duplicate field list and,
for each duplicate field, the new value plus the original value (written to
the output as `original_<field>`).
"""

__all__ = [
    "VariationRecord",
    "ORIGINAL_PREFIX",
]

ORIGINAL_PREFIX = "original_"


@dataclass(frozen=True)
class VariationRecord:
    row_id: Any
    handle: Any
    command: Any  # Pass-through control column, never interpreted
    duplicate_fields: tuple[str, ...]
    variations: dict[str, str]  # field -> generated (or fallback) value
    originals: dict[str, str]  # field -> original value
    failed_fields: tuple[str, ...] = field(default=())  # Fields that fell back to the original

    def to_record(self, id_column: str = "ID", handle_column: str = "Handle",
                  command_column: str = "Command") -> dict[str, Any]:
        """Serialize to the re-import row layout."""
        record: dict[str, Any] = {
            id_column: self.row_id,
            handle_column: self.handle,
            command_column: self.command,
            DUPLICATE_COLUMN: "true",
            DUPLICATE_FIELDS_COLUMN: ",".join(self.duplicate_fields),
        }
        for name in self.duplicate_fields:
            record[name] = self.variations[name]
            record[f"{ORIGINAL_PREFIX}{name}"] = self.originals[name]
        return record
