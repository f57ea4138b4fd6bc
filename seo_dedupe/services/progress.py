from __future__ import annotations

import logging
import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import ProgressSnapshot

"""Progress display for variation generation.

A single tqdm bar (TTY only; disabled in CI to avoid ANSI spam) counts rows
with generated variations. Independently of the bar, every chunk produces a
ProgressSnapshot that is logged as INFO lines so non-TTY runs still show
percent / elapsed / ETA.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
    "log_progress",
]

logger = logging.getLogger(__name__)


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and the progress bar should be displayed."""
    return sys.stdout.isatty()


def log_progress(snapshot: ProgressSnapshot, log: logging.Logger | None = None) -> None:
    log = log or logger
    log.info(f"Progress: {snapshot.percent}% ({snapshot.processed}/{snapshot.total})")
    log.info(f"Time elapsed: {snapshot.elapsed_seconds:.1f} seconds")
    log.info(f"Average time per item: {snapshot.avg_seconds_per_item:.1f} seconds")
    log.info(f"Estimated time remaining: {snapshot.remaining_seconds:.1f} seconds")


class ProgressTracker:
    """Row-level progress bar for chunked generation."""

    def __init__(self, total_items: int, *, description: str = "Generating variations") -> None:
        self.total_items = total_items
        self.description = description
        self.processed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_items,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_batch(self, batch_number: int, total_batches: int) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} (batch {batch_number}/{total_batches})")

    def finish_batch(self, snapshot: ProgressSnapshot) -> None:
        """Advance the bar to snapshot.processed and show the ETA."""
        advance = snapshot.processed - self.processed
        self.processed = snapshot.processed
        if self.enabled and self.pbar is not None:
            self.pbar.update(advance)
            self.pbar.set_postfix(eta=f"{snapshot.remaining_seconds:.0f}s")
            self.pbar.set_description(self.description)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
