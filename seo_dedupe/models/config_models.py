from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the catalog duplicate remediation tool.

These are the immutable, already-validated settings handed to the detector,
the batch orchestrator and the pipeline. The YAML parsing/validation lives in
seo_dedupe/config/loader.py.
"""

DEFAULT_EXCLUDED_FIELDS = ("ID", "Handle", "Command")


@dataclass(frozen=True)
class LLMConfig:
    """Connection settings for the OpenAI-compatible text-generation endpoint.

    Environment variables (LLM_BASE_URL / LLM_API_KEY) take precedence over
    these values; see the loader.
    """
    base_url: str = "http://localhost:11434/v1"  # Ollama の OpenAI 互換エンドポイント
    api_key: str = "ollama"
    timeout_seconds: float = 120.0


@dataclass(frozen=True)
class ColumnConfig:
    """Names of the pass-through columns copied into every variation record."""
    id: str = "ID"
    handle: str = "Handle"
    command: str = "Command"  # Matrixify などのインポート制御列


@dataclass(frozen=True)
class RunConfig:
    """Root configuration object for one remediation run."""
    input_path: str  # Source CSV export
    output_path: str = "./found-duplicates.csv"  # Annotated table destination
    variations_output_path: str = "./variations-output.csv"  # Rewritten rows destination
    batch_size: int = 5  # Rows generated concurrently per chunk
    model: str = "gemma3:4b"
    excluded_fields: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_EXCLUDED_FIELDS))
    verbose: bool = True  # Informational logging only
    columns: ColumnConfig = field(default_factory=ColumnConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    def __post_init__(self) -> None:
        if not isinstance(self.batch_size, int) or self.batch_size < 1:
            raise ValueError(f"batch_size must be a positive integer, got {self.batch_size!r}")
