from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from unittest.mock import Mock, call

import pytest

from seo_dedupe.logging.error_log import ErrorLogBuffer
from seo_dedupe.models.config_models import RunConfig
from seo_dedupe.models.row_data import AnnotatedRow
from seo_dedupe.services.batch import BatchOrchestrator, chunked
from seo_dedupe.services.generator import VariationGenerator


def _dup_rows(n: int, fields=("Title",)) -> list[AnnotatedRow]:
    rows = []
    for i in range(1, n + 1):
        values = {"ID": str(i), "Handle": f"item-{i}", "Command": "MERGE"}
        values.update({f: f"{f} original {i}" for f in fields})
        rows.append(AnnotatedRow(row_number=i, values=values, duplicate_fields=tuple(fields)))
    return rows


def _orchestrator(client, batch_size: int, tmp_path: Path) -> BatchOrchestrator:
    config = RunConfig(input_path="unused.csv", batch_size=batch_size, model="test-model")
    return BatchOrchestrator(
        VariationGenerator(client, config.model),
        config,
        error_log=ErrorLogBuffer(logs_dir=tmp_path / "logs"),
    )


def test_chunked_sizes():
    assert [len(c) for c in chunked(_dup_rows(13), 5)] == [5, 5, 3]
    with pytest.raises(ValueError):
        chunked(_dup_rows(1), 0)


def test_empty_input_makes_no_calls(client_factory, tmp_path: Path):
    client = client_factory()
    orch = _orchestrator(client, 5, tmp_path)
    assert asyncio.run(orch.run([])) == []
    assert client.calls == []
    assert orch.batch_timings.count == 0


def test_output_order_matches_input_across_batches(tmp_path: Path):
    class ReverseSlowClient:
        """Earlier rows finish later, so completion order != input order."""

        async def complete(self, model: str, prompt: str) -> str:
            index = int(prompt.split("original ")[1].split('"')[0])
            await asyncio.sleep((20 - index) * 0.001)
            return f"rewrite {index}"

    rows = _dup_rows(13)
    orch = _orchestrator(ReverseSlowClient(), 5, tmp_path)
    records = asyncio.run(orch.run(rows))

    assert [r.row_id for r in records] == [str(i) for i in range(1, 14)]
    assert [r.variations["Title"] for r in records] == [f"rewrite {i}" for i in range(1, 14)]
    assert orch.batch_timings.count == 3
    assert [s.processed for s in orch.snapshots] == [5, 10, 13]
    assert orch.snapshots[-1].percent == 100
    assert orch.snapshots[-1].remaining_seconds == 0


def test_single_field_failure_falls_back_to_original(tmp_path: Path):
    class FailingClient:
        def __init__(self) -> None:
            self.prompts: list[str] = []

        async def complete(self, model: str, prompt: str) -> str:
            self.prompts.append(prompt)
            if "Body HTML original 2" in prompt:
                raise TimeoutError("model timed out")
            return "<p>nieuw</p>" if "HTML" in prompt else "Nieuwe titel"

    client = FailingClient()
    rows = _dup_rows(4, fields=("Title", "Body HTML"))
    orch = _orchestrator(client, 3, tmp_path)
    records = asyncio.run(orch.run(rows))

    assert len(records) == 4
    failed = records[1]
    assert failed.variations["Body HTML"] == "Body HTML original 2"
    assert failed.originals["Body HTML"] == "Body HTML original 2"
    assert failed.variations["Title"] == "Nieuwe titel"
    assert failed.failed_fields == ("Body HTML",)
    for other in (records[0], records[2], records[3]):
        assert other.failed_fields == ()
        assert other.variations == {"Title": "Nieuwe titel", "Body HTML": "<p>nieuw</p>"}
    # every field of every row was attempted
    assert len(client.prompts) == 8

    errors = orch.error_log.records
    assert [(e.row_id, e.field, e.error_type) for e in errors] == [("2", "Body HTML", "GENERATION_ERROR")]


def test_malformed_response_is_isolated(client_factory, tmp_path: Path):
    def reply(model, prompt):
        return '"""broken' if "original 1" in prompt else "ok"

    orch = _orchestrator(client_factory(reply), 2, tmp_path)
    records = asyncio.run(orch.run(_dup_rows(3)))

    assert records[0].variations["Title"] == "Title original 1"
    assert records[0].failed_fields == ("Title",)
    assert [r.variations["Title"] for r in records[1:]] == ["ok", "ok"]
    assert orch.error_log.records[0].error_type == "MALFORMED_RESPONSE"


def test_rows_run_concurrently_fields_run_sequentially(tmp_path: Path):
    class TrackingClient:
        def __init__(self) -> None:
            self.in_flight = 0
            self.max_in_flight = 0
            self.per_row: dict[str, int] = {}
            self.max_per_row = 0

        async def complete(self, model: str, prompt: str) -> str:
            row = prompt.split("original ")[1].split('"')[0]
            self.in_flight += 1
            self.per_row[row] = self.per_row.get(row, 0) + 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.max_per_row = max(self.max_per_row, self.per_row[row])
            await asyncio.sleep(0.005)
            self.in_flight -= 1
            self.per_row[row] -= 1
            return "x"

    client = TrackingClient()
    orch = _orchestrator(client, 4, tmp_path)
    asyncio.run(orch.run(_dup_rows(6, fields=("Title", "SEO Title", "Body"))))

    # chunk width bounds concurrency; one call per row at a time
    assert client.max_in_flight == 4
    assert client.max_per_row == 1


def test_variation_record_layout(client_factory, tmp_path: Path):
    orch = _orchestrator(client_factory(lambda m, p: "Nieuw"), 5, tmp_path)
    records = asyncio.run(orch.run(_dup_rows(1, fields=("Title", "Body"))))

    assert records[0].to_record() == {
        "ID": "1",
        "Handle": "item-1",
        "Command": "MERGE",
        "duplicate": "true",
        "duplicateFields": "Title,Body",
        "Title": "Nieuw",
        "original_Title": "Title original 1",
        "Body": "Nieuw",
        "original_Body": "Body original 1",
    }


def test_batch_timings_are_measured_and_logged(tmp_path: Path):
    class Clock:
        def __init__(self) -> None:
            self.now = 0.0

        def __call__(self) -> float:
            return self.now

    clock = Clock()

    class TimedClient:
        """Each call advances the clock; row 1 takes 1s, row 2 takes 3s."""

        async def complete(self, model: str, prompt: str) -> str:
            clock.now += 1.0 if "original 1" in prompt else 3.0
            return "x"

    log = Mock(spec=logging.Logger)
    config = RunConfig(input_path="unused.csv", batch_size=1, model="test-model")
    orch = BatchOrchestrator(
        VariationGenerator(TimedClient(), config.model),
        config,
        error_log=ErrorLogBuffer(logs_dir=tmp_path / "logs"),
        logger=log,
        clock=clock,
    )
    asyncio.run(orch.run(_dup_rows(2)))

    assert orch.batch_timings.seconds == [1.0, 3.0]
    assert orch.batch_timings.mean == 2.0
    assert orch.batch_timings.p95 == pytest.approx(2.9)
    assert call("Batch timings: batches=2 avg=2.00s p95=2.90s") in log.info.call_args_list
