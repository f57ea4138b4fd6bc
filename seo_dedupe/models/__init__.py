"""Domain models for the catalog duplicate remediation tool."""

from .config_models import ColumnConfig, LLMConfig, RunConfig
from .error_record import ErrorRecord
from .processing_result import BatchTimings, ProgressSnapshot, RunResult
from .row_data import AnnotatedRow
from .variation_record import VariationRecord

__all__ = [
    # Configuration models
    "ColumnConfig",
    "LLMConfig",
    "RunConfig",
    # Processing models
    "AnnotatedRow",
    "VariationRecord",
    "ErrorRecord",
    "RunResult",
    "ProgressSnapshot",
    "BatchTimings",
]
