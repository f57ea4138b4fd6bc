# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from seo_dedupe.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for var in ("LLM_BASE_URL", "LLM_API_KEY", "LLM_MODEL"):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """input_path: ./data/export.csv
output_path: ./out/found-duplicates.csv
variations_output_path: ./out/variations-output.csv
batch_size: 2
model: gemma3:4b
excluded_fields: [ID, Handle, Command]
verbose: true
llm:
  base_url: http://localhost:11434/v1
  api_key: ollama
  timeout_seconds: 30
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dedupe.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


SAMPLE_CSV = """ID,Handle,Command,Title,Body HTML
1,red-shoe-rood,MERGE,Red Shoe,<p>Comfortable shoe</p>
2,red-shoe-2,MERGE,Red Shoe,<p>Comfortable shoe</p>
3,blue-hat,MERGE,Blue Hat,<p>Warm hat</p>
4,empty-row,MERGE,,
5,red-shoe-3,MERGE,Red Shoe,<p>Other text</p>
"""


@pytest.fixture()
def sample_csv(temp_workdir: Path) -> Path:
    p = temp_workdir / "data" / "export.csv"
    p.write_text(SAMPLE_CSV, encoding="utf-8")
    return p


class FakeClient:
    """In-memory TextGenerator: records calls, answers through `reply`."""

    def __init__(self, reply: Callable[[str, str], str] | None = None) -> None:
        self.calls: list[tuple[str, str]] = []
        self._reply = reply or (lambda model, prompt: "Nieuwe tekst")

    async def complete(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        return self._reply(model, prompt)


@pytest.fixture()
def client_factory() -> type[FakeClient]:
    return FakeClient
