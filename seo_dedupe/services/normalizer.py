from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from typing import Any

"""Record normalization: comparable field values from a raw row.

Only non-excluded fields take part in duplicate comparison. Their values must
be strings; anything else is a malformed row and fails fast.
"""

__all__ = [
    "ValidationError",
    "extract_field_values",
    "is_row_empty",
    "drop_empty_rows",
]


class ValidationError(Exception):
    """Raised when a compared field holds a non-string value."""


def _checked(row: Mapping[str, Any], key: str) -> str:
    value = row[key]
    if not isinstance(value, str):
        raise ValidationError(
            f"field '{key}' must be a string, got {type(value).__name__}: {value!r}"
        )
    return value


def extract_field_values(row: Mapping[str, Any], excluded_fields: Collection[str]) -> dict[str, str]:
    """Return field -> trimmed value for every non-excluded, non-blank field.

    Field order follows the row's own key order.
    """
    values: dict[str, str] = {}
    for key in row:
        if key in excluded_fields:
            continue
        trimmed = _checked(row, key).strip()
        if trimmed:
            values[key] = trimmed
    return values


def is_row_empty(row: Mapping[str, Any], excluded_fields: Collection[str]) -> bool:
    """True iff every non-excluded field is empty or whitespace."""
    return not extract_field_values(row, excluded_fields)


def drop_empty_rows(
    rows: Iterable[Mapping[str, Any]], excluded_fields: Collection[str]
) -> list[Mapping[str, Any]]:
    return [row for row in rows if not is_row_empty(row, excluded_fields)]
