from __future__ import annotations

import logging
import time
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import RunConfig
from ..models.processing_result import BatchTimings, RunResult
from ..tabular.reader import read_table, write_table
from .batch import BatchOrchestrator
from .duplicates import DuplicateDetector
from .generator import VariationGenerator
from .llm_client import TextGenerator
from .normalizer import ValidationError

"""End-to-end run: read -> detect -> generate -> write.

Fatal errors (TableIOError, ProcessingError) propagate to the CLI. Per-field
generation failures are absorbed by the BatchOrchestrator and only show up in
failed_fields / the error log, which is flushed even when writing the
variations table fails.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal error during detection (e.g. a malformed input row)."""


async def run_pipeline(
    config: RunConfig,
    client: TextGenerator | None,
    *,
    dry_run: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Run one remediation pass over config.input_path.

    With dry_run the variation step is skipped (no model calls, no
    variations file); client may then be None.
    """
    started = time.monotonic()
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    table = read_table(Path(config.input_path))
    logger.info(f"Read {len(table.rows)} rows ({len(table.columns)} columns) from {config.input_path}")

    try:
        detection = DuplicateDetector(config).detect(table.rows)
    except ValidationError as e:
        raise ProcessingError(f"invalid input row: {e}") from e

    write_table((row.to_record() for row in detection.annotated), Path(config.output_path))

    failed_fields = 0
    variation_rows = 0
    timings = BatchTimings()
    if dry_run:
        logger.info("Dry run: skipping variation generation")
    else:
        if client is None:
            raise ProcessingError("a text-generation client is required unless dry_run is set")
        generator = VariationGenerator(client, config.model)
        orchestrator = BatchOrchestrator(generator, config, error_log=error_log)
        try:
            variations = await orchestrator.run(detection.duplicates)
            timings = orchestrator.batch_timings
            failed_fields = sum(len(v.failed_fields) for v in variations)
            cols = config.columns
            variation_rows = write_table(
                (v.to_record(cols.id, cols.handle, cols.command) for v in variations),
                Path(config.variations_output_path),
            )
        finally:
            # variations 書き込み失敗時もフォールバック記録は残す
            _flush_error_log(error_log)

    elapsed = time.monotonic() - started
    return RunResult(
        total_rows=len(table.rows),
        dropped_empty_rows=detection.dropped_empty_rows,
        duplicate_rows=len(detection.duplicates),
        variation_rows=variation_rows,
        failed_fields=failed_fields,
        total_batches=timings.count,
        elapsed_seconds=elapsed,
        avg_seconds_per_item=elapsed / variation_rows if variation_rows else 0.0,
        avg_batch_seconds=timings.mean,
        p95_batch_seconds=timings.p95,
    )


def _flush_error_log(error_log: ErrorLogBuffer) -> None:
    """Write buffered fallback records; a failing write is logged, not raised."""
    counts = error_log.counts_by_type()
    try:
        path = error_log.flush()
    except OSError as e:
        logger.error(f"failed to write error log: {e}")
        return
    if path is not None:
        breakdown = ", ".join(f"{kind}={n}" for kind, n in sorted(counts.items()))
        logger.warning(
            f"{sum(counts.values())} field generations fell back to the original text "
            f"({breakdown}); see {path}"
        )
