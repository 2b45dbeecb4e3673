"""Tests for BulkBatchProcessor: ordering, throttling and partial failure."""

from __future__ import annotations

from contextlib import aclosing

import pytest
from pydantic import ValidationError

from peering_spine.bulk import (
    BulkBatchProcessor,
    BulkItemResult,
    BulkOperation,
    BulkRequest,
    BulkRunResult,
    BulkState,
)
from peering_spine.registry import Operation


@pytest.fixture
def processor(dispatcher, recording_sleep) -> BulkBatchProcessor:
    return BulkBatchProcessor(dispatcher, delay_seconds=1.0, sleep=recording_sleep)


def _orgs(*names) -> list[dict]:
    return [{"name": n} for n in names]


# ── Batching and delays ──────────────────────────────────────────────────


class TestBatching:
    @pytest.mark.asyncio
    async def test_partial_failure_keeps_order(self, processor, fake_backend, recording_sleep):
        items = [{"name": "A"}, {"name": 5}, {"name": "C"}]
        run = await processor.run("org", BulkOperation.CREATE, items, batch_size=2)

        assert [r.index for r in run.results] == [0, 1, 2]
        assert [r.success for r in run.results] == [True, False, True]
        assert run.successful_count == 2
        assert run.failed_count == 1
        assert run.results[1].error_code == "VALIDATION_FAILED"
        assert run.results[1].item == {"name": 5}
        assert recording_sleep.delays == [1.0]
        assert (run.batches, run.delays) == (2, 1)
        assert [c[2] for c in fake_backend.calls] == [{"name": "A"}, {"name": "C"}]

    @pytest.mark.asyncio
    async def test_backend_crash_fails_only_that_item(self, processor, fake_backend, recording_sleep, monkeypatch):
        deleted = []

        async def delete(endpoint, instance_id):
            if instance_id == 2:
                raise RuntimeError("connection pool exploded")
            deleted.append(instance_id)

        monkeypatch.setattr(fake_backend, "delete", delete)
        run = await processor.run("org", "delete", [{"id": 1}, {"id": 2}, {"id": 3}], batch_size=2)

        assert [r.success for r in run.results] == [True, False, True]
        assert run.results[1].error_code == "INTERNAL_ERROR"
        assert run.results[1].error_message == "connection pool exploded"
        assert deleted == [1, 3]
        assert recording_sleep.delays == [1.0]
        assert processor.state is BulkState.DONE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "count,batch_size,expected_delays",
        [(4, 2, 1), (4, 1, 3), (2, 1, 1), (3, 10, 0), (1, 1, 0), (5, 2, 2)],
    )
    async def test_delay_only_between_batches(self, processor, recording_sleep, count, batch_size, expected_delays):
        names = [f"Org {i}" for i in range(count)]
        run = await processor.run("org", "create", _orgs(*names), batch_size=batch_size)
        assert len(recording_sleep.delays) == expected_delays
        assert run.delays == expected_delays
        assert run.total == count

    @pytest.mark.asyncio
    async def test_empty_items(self, processor, fake_backend, recording_sleep):
        run = await processor.run("org", BulkOperation.CREATE, [], batch_size=3)
        assert run.results == []
        assert run.batches == 0
        assert recording_sleep.delays == []
        assert fake_backend.calls == []
        assert processor.state is BulkState.DONE

    @pytest.mark.asyncio
    async def test_configured_delay_is_used(self, dispatcher, recording_sleep):
        processor = BulkBatchProcessor(dispatcher, delay_seconds=0.25, sleep=recording_sleep)
        await processor.run("org", "create", _orgs("A", "B"), batch_size=1)
        assert recording_sleep.delays == [0.25]

    @pytest.mark.asyncio
    async def test_invalid_batch_size(self, processor, fake_backend):
        with pytest.raises(ValueError, match="batch_size"):
            await processor.run("org", "create", _orgs("A"), batch_size=0)
        assert fake_backend.calls == []
        assert processor.state is BulkState.IDLE


# ── Operations ───────────────────────────────────────────────────────────


class TestOperations:
    @pytest.mark.asyncio
    async def test_update_and_delete(self, processor, fake_backend):
        await processor.run("org", BulkOperation.UPDATE, [{"id": 1, "name": "Acme"}])
        await processor.run("org", BulkOperation.DELETE, [{"id": 1}, {"id": 2}])
        assert fake_backend.calls == [
            ("full_update", "org", 1, {"name": "Acme"}),
            ("delete", "org", 1),
            ("delete", "org", 2),
        ]

    @pytest.mark.asyncio
    async def test_unknown_type_fails_every_item(self, processor, fake_backend):
        run = await processor.run("carrier", "create", _orgs("A", "B"))
        assert run.failed_count == 2
        assert {r.error_code for r in run.results} == {"UNKNOWN_TYPE"}
        assert fake_backend.calls == []

    @pytest.mark.asyncio
    async def test_unknown_bulk_operation(self, processor):
        with pytest.raises(ValueError):
            await processor.run("org", "patch", _orgs("A"))

    def test_bulk_operation_maps_to_operation(self):
        assert BulkOperation.UPDATE.operation is Operation.UPDATE
        assert [op.value for op in BulkOperation] == ["create", "update", "delete"]


# ── Streaming ────────────────────────────────────────────────────────────


class TestIterResults:
    @pytest.mark.asyncio
    async def test_abandon_stops_processing(self, processor, fake_backend, recording_sleep):
        seen: list[BulkItemResult] = []
        async with aclosing(processor.iter_results("org", "create", _orgs("A", "B", "C"), batch_size=1)) as results:
            async for result in results:
                seen.append(result)
                break
        assert len(seen) == 1
        assert len(fake_backend.calls) == 1
        assert recording_sleep.delays == []
        assert processor.state is BulkState.DONE

    @pytest.mark.asyncio
    async def test_state_transitions(self, dispatcher):
        states = []

        async def sleep(seconds: float) -> None:
            states.append(processor.state)

        processor = BulkBatchProcessor(dispatcher, sleep=sleep)
        assert processor.state is BulkState.IDLE
        async with aclosing(processor.iter_results("org", "create", _orgs("A", "B"), batch_size=1)) as results:
            async for _ in results:
                states.append(processor.state)
        assert states == [BulkState.PROCESSING, BulkState.DELAY, BulkState.PROCESSING]
        assert processor.state is BulkState.DONE


# ── Request and result shapes ────────────────────────────────────────────


class TestShapes:
    @pytest.mark.asyncio
    async def test_run_request(self, processor, recording_sleep):
        request = BulkRequest(operation="create", items=_orgs("A", "B", "C"), batch_size=2)
        run = await processor.run_request("org", request)
        assert run.successful_count == 3
        assert recording_sleep.delays == [1.0]

    def test_request_defaults_and_bounds(self):
        assert BulkRequest(operation="delete", items=[]).batch_size == 10
        with pytest.raises(ValidationError):
            BulkRequest(operation="create", items=[], batch_size=0)
        with pytest.raises(ValidationError):
            BulkRequest(operation="patch", items=[])

    def test_run_result_to_dict(self):
        run = BulkRunResult(
            type_name="org",
            operation=BulkOperation.CREATE,
            results=[
                BulkItemResult(index=0, success=True, item={"name": "A"}, response={"data": [{"id": 1}]}),
                BulkItemResult(
                    index=1,
                    success=False,
                    item={"name": 5},
                    error_message="Validation failed for org: name: Input should be a valid string",
                    error_code="VALIDATION_FAILED",
                ),
            ],
        )
        assert run.to_dict() == {
            "type_name": "org",
            "operation": "create",
            "successful_count": 1,
            "failed_count": 1,
            "results": [
                {"success": True, "item": {"name": "A"}, "response": {"data": [{"id": 1}]}},
                {
                    "success": False,
                    "item": {"name": 5},
                    "error_message": "Validation failed for org: name: Input should be a valid string",
                    "error_code": "VALIDATION_FAILED",
                },
            ],
        }
