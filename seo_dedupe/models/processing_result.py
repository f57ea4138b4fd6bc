from __future__ import annotations

import statistics
from dataclasses import dataclass, field

"""Processing result models.

RunResult aggregates the metrics of one remediation run for the SUMMARY line,
ProgressSnapshot is the per-chunk progress report, and BatchTimings
collects chunk timings.
"""


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one remediation run."""
    total_rows: int  # Rows read from the source table
    dropped_empty_rows: int  # Rows without any non-excluded value
    duplicate_rows: int  # Rows with at least one duplicate field
    variation_rows: int  # VariationRecords written
    failed_fields: int  # Field generations that fell back to the original
    total_batches: int
    elapsed_seconds: float
    avg_seconds_per_item: float
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class ProgressSnapshot:
    """Progress after a completed chunk."""
    percent: int  # Rounded, capped at 100
    processed: int
    total: int
    elapsed_seconds: float
    avg_seconds_per_item: float
    remaining_seconds: float

    @classmethod
    def compute(cls, processed: int, total: int, elapsed_seconds: float) -> ProgressSnapshot:
        """Derive percent / average / ETA from raw counters.

        Zero processed items yields a zero average (no division).
        """
        percent = min(100, round(processed / total * 100)) if total > 0 else 100
        avg = elapsed_seconds / processed if processed > 0 else 0.0
        remaining = max(total - processed, 0) * avg
        return cls(
            percent=percent,
            processed=processed,
            total=total,
            elapsed_seconds=elapsed_seconds,
            avg_seconds_per_item=avg,
            remaining_seconds=remaining,
        )


@dataclass
class BatchTimings:
    """Wall-clock seconds of each finished chunk, in run order."""
    seconds: list[float] = field(default_factory=list)

    def record(self, elapsed_seconds: float) -> None:
        self.seconds.append(elapsed_seconds)

    @property
    def count(self) -> int:
        return len(self.seconds)

    @property
    def mean(self) -> float:
        return statistics.fmean(self.seconds) if self.seconds else 0.0

    @property
    def p95(self) -> float:
        # quantiles() needs two points; a single chunk is its own p95
        if len(self.seconds) < 2:
            return self.seconds[0] if self.seconds else 0.0
        return statistics.quantiles(self.seconds, n=20, method="inclusive")[18]
