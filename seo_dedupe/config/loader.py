from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError as SchemaValidationError

from seo_dedupe.models.config_models import (
    DEFAULT_EXCLUDED_FIELDS,
    ColumnConfig,
    LLMConfig,
    RunConfig,
)

"""Config loader.

Responsibilities:
- Load the YAML run configuration (default config/dedupe.yml)
- Validate it against the JSON schema shipped next to this module
- Apply defaults and environment overrides (LLM_BASE_URL / LLM_API_KEY / LLM_MODEL)
- Return an immutable RunConfig
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")
DEFAULT_CONFIG_PATH = Path("config/dedupe.yml")

ENV_BASE_URL = "LLM_BASE_URL"
ENV_API_KEY = "LLM_API_KEY"
ENV_MODEL = "LLM_MODEL"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the
            config data fails validation (missing required keys, wrong types,
            unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except SchemaValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> RunConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    llm_raw = data.get("llm", {})
    defaults = LLMConfig()
    # 環境変数 (.env 含む) が設定ファイルより優先
    llm = LLMConfig(
        base_url=os.getenv(ENV_BASE_URL) or llm_raw.get("base_url", defaults.base_url),
        api_key=os.getenv(ENV_API_KEY) or llm_raw.get("api_key", defaults.api_key),
        timeout_seconds=float(llm_raw.get("timeout_seconds", defaults.timeout_seconds)),
    )
    cols_raw = data.get("columns", {})
    columns = ColumnConfig(**cols_raw)

    return RunConfig(
        input_path=data["input_path"],
        output_path=data.get("output_path", RunConfig.output_path),
        variations_output_path=data.get("variations_output_path", RunConfig.variations_output_path),
        batch_size=data.get("batch_size", RunConfig.batch_size),
        model=os.getenv(ENV_MODEL) or data.get("model", RunConfig.model),
        excluded_fields=frozenset(data.get("excluded_fields", DEFAULT_EXCLUDED_FIELDS)),
        verbose=data.get("verbose", True),
        columns=columns,
        llm=llm,
    )
