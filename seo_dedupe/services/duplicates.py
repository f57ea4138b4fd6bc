from __future__ import annotations

import logging
import time
from collections.abc import Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.config_models import RunConfig
from ..models.row_data import AnnotatedRow
from .normalizer import drop_empty_rows, extract_field_values

"""Duplicate detection over the cleaned row sequence.

Two passes:
1. count_occurrences: (field, value) -> number of rows holding it
2. find_duplicates: walk rows in order; for each (field, value) seen in more
   than one row, the first row holding it keeps it, every later row gets the
   field listed in its duplicate_fields.

First-seen-wins: the first occurrence is never flagged, regardless of how many
later rows share the value.
"""

logger = logging.getLogger(__name__)

OccurrenceKey = tuple[str, str]


@dataclass(frozen=True)
class DetectionResult:
    annotated: list[AnnotatedRow]  # Every cleaned row, in input order
    duplicates: list[AnnotatedRow]  # Subset with at least one duplicate field
    occurrences: dict[OccurrenceKey, int] = field(default_factory=dict)
    dropped_empty_rows: int = 0


def count_occurrences(
    rows: Iterable[Mapping[str, Any]], excluded_fields: Collection[str]
) -> dict[OccurrenceKey, int]:
    counts: dict[OccurrenceKey, int] = {}
    for row in rows:
        for key in extract_field_values(row, excluded_fields).items():
            counts[key] = counts.get(key, 0) + 1
    return counts


def find_duplicates(
    rows: Sequence[Mapping[str, Any]],
    occurrences: Mapping[OccurrenceKey, int],
    excluded_fields: Collection[str],
) -> tuple[list[AnnotatedRow], list[AnnotatedRow]]:
    seen: set[OccurrenceKey] = set()
    annotated: list[AnnotatedRow] = []
    duplicates: list[AnnotatedRow] = []

    for index, row in enumerate(rows, start=1):
        duplicate_fields: list[str] = []
        for key in extract_field_values(row, excluded_fields).items():
            if occurrences.get(key, 0) <= 1:
                continue
            if key not in seen:
                seen.add(key)
            else:
                duplicate_fields.append(key[0])

        item = AnnotatedRow(row_number=index, values=dict(row), duplicate_fields=tuple(duplicate_fields))
        annotated.append(item)
        if item.is_duplicate:
            duplicates.append(item)

    return annotated, duplicates


class DuplicateDetector:
    """Runs cleaning + both detection passes with the configured exclusions."""

    def __init__(self, config: RunConfig, logger: logging.Logger | None = None) -> None:
        self.excluded_fields = frozenset(config.excluded_fields)
        self.logger = logger or logging.getLogger(__name__)

    def detect(self, rows: Sequence[Mapping[str, Any]]) -> DetectionResult:
        started = time.perf_counter()
        cleaned = drop_empty_rows(rows, self.excluded_fields)
        dropped = len(rows) - len(cleaned)
        if dropped:
            self.logger.info(f"Dropped {dropped} empty rows")

        occurrences = count_occurrences(cleaned, self.excluded_fields)
        annotated, duplicates = find_duplicates(cleaned, occurrences, self.excluded_fields)

        self.logger.info(
            f"Duplicate detection: rows={len(cleaned)} duplicate_rows={len(duplicates)} "
            f"elapsed={time.perf_counter() - started:.3f}s"
        )
        return DetectionResult(
            annotated=annotated,
            duplicates=duplicates,
            occurrences=occurrences,
            dropped_empty_rows=dropped,
        )
