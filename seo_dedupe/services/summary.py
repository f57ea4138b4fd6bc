from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering.

Format (the "SUMMARY" label itself is added by logging.init.log_summary):
rows={n} dropped_empty={n} duplicates={n} variations={n} failed_fields={n}
batches={n} batch_avg_sec={x} batch_p95_sec={x} elapsed_sec={x} avg_item_sec={x}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Avoid scientific notation for tiny values
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.2f}".rstrip('0').rstrip('.')


def render_summary_line(result: RunResult) -> str:
    """Render the body of the SUMMARY line for a finished run.

    Examples:
        >>> result = RunResult(
        ...     total_rows=10, dropped_empty_rows=1, duplicate_rows=3, variation_rows=3,
        ...     failed_fields=0, total_batches=1, elapsed_seconds=2.0, avg_seconds_per_item=0.5,
        ...     avg_batch_seconds=1.5, p95_batch_seconds=1.5,
        ... )
        >>> render_summary_line(result)
        'rows=10 dropped_empty=1 duplicates=3 variations=3 failed_fields=0 batches=1 batch_avg_sec=1.5 batch_p95_sec=1.5 elapsed_sec=2 avg_item_sec=0.5'
    """
    return (
        f"rows={result.total_rows} "
        f"dropped_empty={result.dropped_empty_rows} "
        f"duplicates={result.duplicate_rows} "
        f"variations={result.variation_rows} "
        f"failed_fields={result.failed_fields} "
        f"batches={result.total_batches} "
        f"batch_avg_sec={_format_seconds(result.avg_batch_seconds)} "
        f"batch_p95_sec={_format_seconds(result.p95_batch_seconds)} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)} "
        f"avg_item_sec={_format_seconds(result.avg_seconds_per_item)}"
    )
