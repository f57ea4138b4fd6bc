from __future__ import annotations

import re
from pathlib import Path
from unittest.mock import patch

from seo_dedupe.cli import main as cli_main
from seo_dedupe.services.normalizer import ValidationError

"""Exit code contract: 0 on success (fallbacks included), 1 on fatal errors."""


class _StubClient:
    def __init__(self, reply: str = "Nieuw", fail: bool = False) -> None:
        self.reply = reply
        self.fail = fail
        self.closed = False

    async def complete(self, model: str, prompt: str) -> str:
        if self.fail:
            raise ConnectionError("connection refused")
        return self.reply

    async def close(self) -> None:
        self.closed = True


def test_exit_code_missing_config(temp_workdir: Path, capsys):
    code = cli_main([])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_missing_input(temp_workdir: Path, write_config: Path, capsys):
    code = cli_main([])
    assert code == 1
    assert "ERROR io:" in capsys.readouterr().out


def test_exit_code_success_prints_summary(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    stub = _StubClient()
    with patch("seo_dedupe.cli.app.create_text_generator", return_value=stub):
        code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert stub.closed is True
    summary = [line for line in out.splitlines() if line.startswith("SUMMARY ")]
    assert len(summary) == 1
    assert re.match(
        r"^SUMMARY rows=5 dropped_empty=1 duplicates=2 variations=2 failed_fields=0 batches=1 "
        r"batch_avg_sec=[0-9.]+ batch_p95_sec=[0-9.]+ elapsed_sec=[0-9.]+ avg_item_sec=[0-9.]+$",
        summary[0],
    )
    assert "SUMMARY SUMMARY" not in out


def test_exit_code_zero_when_every_generation_fails(
    temp_workdir: Path, write_config: Path, sample_csv: Path, capsys
):
    with patch("seo_dedupe.cli.app.create_text_generator", return_value=_StubClient(fail=True)):
        code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "failed_fields=3" in out
    assert "ERROR Error generating variation for ID 2 - Title" in out


def test_exit_code_validation_failure(temp_workdir: Path, write_config: Path, capsys):
    (temp_workdir / "data" / "export.csv").write_text("ID,Title\n1,A\n", encoding="utf-8")
    with patch("seo_dedupe.services.duplicates.DuplicateDetector.detect", side_effect=ValidationError("bad")):
        code = cli_main(["--dry-run"])
    assert code == 1
    assert "ERROR processing:" in capsys.readouterr().out


def test_dry_run_makes_no_client(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    with patch("seo_dedupe.cli.app.create_text_generator") as factory:
        code = cli_main(["--dry-run"])
    assert code == 0
    factory.assert_not_called()
    assert "variations=0" in capsys.readouterr().out


def test_inspect_data(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "columns=['ID', 'Handle', 'Command', 'Title', 'Body HTML']" in out


def test_debug_and_quiet_flags(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    code = cli_main(["--dry-run", "--debug", "--quiet"])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO " not in out
    assert "SUMMARY rows=5" in out
