from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ColumnConfig, RunConfig
from ..models.error_record import ErrorRecord
from ..models.processing_result import BatchTimings, ProgressSnapshot
from ..models.row_data import AnnotatedRow
from ..models.variation_record import VariationRecord
from .generator import GenerationError, MalformedResponseError, VariationGenerator
from .progress import ProgressTracker, log_progress

"""Batch orchestration for variation generation.

The duplicate rows are split into consecutive chunks of batch_size. Chunks run
one after another; the rows of a chunk run concurrently (asyncio.gather, so
results come back in row order, not completion order). Inside one row the
duplicate fields are generated one at a time, so there is never more than one
in-flight model call per row.

A failed field never fails the run: the original text is kept for that field,
the error is logged and buffered, and processing moves on.
"""

logger = logging.getLogger(__name__)

ERROR_TYPE_MALFORMED = "MALFORMED_RESPONSE"
ERROR_TYPE_GENERATION = "GENERATION_ERROR"
ERROR_TYPE_UNEXPECTED = "UNEXPECTED_ERROR"


def _error_type(error: Exception) -> str:
    if isinstance(error, MalformedResponseError):
        return ERROR_TYPE_MALFORMED
    if isinstance(error, GenerationError):
        return ERROR_TYPE_GENERATION
    return ERROR_TYPE_UNEXPECTED


def chunked(items: Sequence[AnnotatedRow], size: int) -> list[Sequence[AnnotatedRow]]:
    if size < 1:
        raise ValueError(f"batch size must be positive, got {size}")
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchOrchestrator:
    def __init__(
        self,
        generator: VariationGenerator,
        config: RunConfig,
        *,
        error_log: ErrorLogBuffer | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.generator = generator
        self.model = config.model
        self.batch_size = config.batch_size
        self.columns: ColumnConfig = config.columns
        self.error_log = error_log if error_log is not None else ErrorLogBuffer()
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock
        self.batch_timings = BatchTimings()
        self.snapshots: list[ProgressSnapshot] = []

    async def run(self, duplicate_rows: Sequence[AnnotatedRow]) -> list[VariationRecord]:
        """Generate variations for every duplicate row, chunk by chunk."""
        if not duplicate_rows:
            self.logger.info("No duplicates to process")
            return []

        batches = chunked(duplicate_rows, self.batch_size)
        total = len(duplicate_rows)
        self.logger.info(
            f"Starting variation generation: duplicates={total} batch_size={self.batch_size} "
            f"batches={len(batches)} model={self.model}"
        )

        variations: list[VariationRecord] = []
        started = self.clock()
        with ProgressTracker(total) as progress:
            for number, batch in enumerate(batches, start=1):
                progress.start_batch(number, len(batches))
                self.logger.info(f"Processing batch {number}/{len(batches)}")

                batch_started = self.clock()
                results = await self.process_batch(batch)
                self.batch_timings.record(self.clock() - batch_started)
                variations.extend(results)

                snapshot = ProgressSnapshot.compute(len(variations), total, self.clock() - started)
                self.snapshots.append(snapshot)
                progress.finish_batch(snapshot)
                log_progress(snapshot, self.logger)

        elapsed = self.clock() - started
        self.logger.info(
            f"Variation generation complete: total={elapsed:.1f}s "
            f"avg_per_item={elapsed / total:.1f}s"
        )
        timings = self.batch_timings
        self.logger.info(
            f"Batch timings: batches={timings.count} avg={timings.mean:.2f}s p95={timings.p95:.2f}s"
        )
        return variations

    async def process_batch(self, batch: Sequence[AnnotatedRow]) -> list[VariationRecord]:
        ids = ", ".join(str(row.get(self.columns.id)) for row in batch)
        self.logger.info(f"Starting batch processing for {len(batch)} items: {ids}")
        # gather は入力順で結果を返す
        results = await asyncio.gather(*(self.process_row(row) for row in batch))
        self.logger.info(f"Batch processing completed for {len(batch)} items")
        return list(results)

    async def process_row(self, row: AnnotatedRow) -> VariationRecord:
        row_id = row.get(self.columns.id)
        handle = row.get(self.columns.handle) or ""
        variations: dict[str, str] = {}
        originals: dict[str, str] = {}
        failed: list[str] = []

        for field in row.duplicate_fields:
            original = row.get(field)
            originals[field] = original
            try:
                started = self.clock()
                variations[field] = await self.generator.generate(original, handle, field, self.model)
                self.logger.debug(f"Generation time for ID {row_id} - {field}: {self.clock() - started:.2f}s")
            except Exception as e:
                self._record_failure(row_id, field, _error_type(e), e)
                variations[field] = original
                failed.append(field)

        return VariationRecord(
            row_id=row_id,
            handle=row.get(self.columns.handle),
            command=row.get(self.columns.command),
            duplicate_fields=row.duplicate_fields,
            variations=variations,
            originals=originals,
            failed_fields=tuple(failed),
        )

    def _record_failure(self, row_id: object, field: str, error_type: str, error: Exception) -> None:
        self.logger.error(
            f"Error generating variation for ID {row_id} - {field}: {error}; keeping original value"
        )
        self.error_log.append(ErrorRecord.create(row_id, field, error_type, str(error)))
