"""Bulk batch processor: throttled, sequential, partial-failure tolerant.

WHY
───
PeeringDB rate-limits writes.  A bulk request is therefore never fanned out:
items go through the :class:`~peering_spine.dispatch.OperationDispatcher` one
at a time, in input order, with a pause between fixed-size batches.  A failed
item is recorded and the run carries on; there is no atomicity across a
batch and nothing is retried.

ARCHITECTURE
────────────
::

    IDLE ──► PROCESSING ──(batch exhausted, items remain)──► BATCH_COMPLETE ──► DELAY ──┐
               ▲                                                                      │
               └──────────────────────────────────────────────────────────────────────┘
    PROCESSING ──(no items remain)──► DONE

    BulkBatchProcessor
      ├── .iter_results(...)  ─ async generator, one BulkItemResult per item
      ├── .run(...)           ─ drains iter_results into a BulkRunResult
      └── .run_request(...)   ─ same, from a validated BulkRequest

Delay happens only *between* batches: never before the first or after the
last.  ``sleep`` is injectable so tests can record delays instead of waiting.
A caller that stops iterating :meth:`BulkBatchProcessor.iter_results` early
abandons the remaining items; completed items are not rolled back.

Example::

    processor = BulkBatchProcessor(dispatcher, delay_seconds=1.0)
    result = await processor.run("net", BulkOperation.CREATE, items, batch_size=2)
    print(result.successful_count, result.failed_count)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from peering_spine.core.logging import get_logger
from peering_spine.dispatch import OperationDispatcher
from peering_spine.registry import Operation

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_DELAY_SECONDS = 1.0


class BulkOperation(str, Enum):
    """Operations accepted in a bulk request."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def operation(self) -> Operation:
        return Operation(self.value)


class BulkState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    BATCH_COMPLETE = "batch_complete"
    DELAY = "delay"
    DONE = "done"


class BulkRequest(BaseModel):
    """Validated bulk request body."""

    operation: BulkOperation
    items: list[dict[str, Any]]
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)


@dataclass(frozen=True)
class BulkItemResult:
    """Outcome of one item; ``index`` is its position in the input."""

    index: int
    success: bool
    item: Any
    response: Any = None
    error_message: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"success": self.success, "item": self.item}
        if self.success:
            d["response"] = self.response
        else:
            d["error_message"] = self.error_message
            d["error_code"] = self.error_code
        return d


@dataclass
class BulkRunResult:
    """Aggregate of a bulk run, results in input order."""

    type_name: str
    operation: BulkOperation
    results: list[BulkItemResult] = field(default_factory=list)
    batches: int = 0
    delays: int = 0

    @property
    def successful_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging / tool responses."""
        return {
            "type_name": self.type_name,
            "operation": self.operation.value,
            "successful_count": self.successful_count,
            "failed_count": self.failed_count,
            "results": [r.to_dict() for r in self.results],
        }


SleepFn = Callable[[float], Awaitable[Any]]


class BulkBatchProcessor:
    """Sequential, batched execution of one operation over many items.

    Parameters
    ----------
    dispatcher : OperationDispatcher
        Validates and performs each item.
    delay_seconds : float
        Pause between consecutive batches (default 1.0).
    sleep : callable
        Awaitable used for the pause (default :func:`asyncio.sleep`).
    """

    def __init__(
        self,
        dispatcher: OperationDispatcher,
        *,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._dispatcher = dispatcher
        self._delay_seconds = delay_seconds
        self._sleep = sleep
        self._state = BulkState.IDLE
        self._batches = 0
        self._delays = 0

    @property
    def state(self) -> BulkState:
        return self._state

    # ── Execution ────────────────────────────────────────────────────

    async def iter_results(
        self,
        type_name: str,
        operation: BulkOperation | str,
        items: Sequence[Any],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> AsyncIterator[BulkItemResult]:
        """Yield one :class:`BulkItemResult` per item, in input order.

        Raises:
            ValueError: *batch_size* is less than 1 or *operation* is unknown.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        bulk_op = BulkOperation(operation)

        self._batches = 0
        self._delays = 0
        self._state = BulkState.PROCESSING
        logger.info(
            "bulk.start",
            type_name=type_name,
            operation=bulk_op.value,
            items=len(items),
            batch_size=batch_size,
        )

        try:
            for start in range(0, len(items), batch_size):
                if start:
                    self._state = BulkState.DELAY
                    self._delays += 1
                    await self._sleep(self._delay_seconds)
                    self._state = BulkState.PROCESSING

                self._batches += 1
                logger.debug("bulk.batch_start", type_name=type_name, batch=self._batches, offset=start)
                for index in range(start, min(start + batch_size, len(items))):
                    yield await self._process_one(type_name, bulk_op, index, items[index])

                if start + batch_size < len(items):
                    self._state = BulkState.BATCH_COMPLETE
        finally:
            self._state = BulkState.DONE

        logger.info(
            "bulk.complete",
            type_name=type_name,
            operation=bulk_op.value,
            batches=self._batches,
            delays=self._delays,
        )

    async def _process_one(
        self,
        type_name: str,
        bulk_op: BulkOperation,
        index: int,
        item: Any,
    ) -> BulkItemResult:
        try:
            result = await self._dispatcher.dispatch(type_name, bulk_op.operation, item)
        except Exception as e:
            # A misbehaving backend fails this item, not the run.
            logger.warning(
                "bulk.item_crashed",
                type_name=type_name,
                index=index,
                error_type=e.__class__.__name__,
                error=str(e),
            )
            return BulkItemResult(
                index=index,
                success=False,
                item=item,
                error_message=str(e) or e.__class__.__name__,
                error_code="INTERNAL_ERROR",
            )
        if result.success:
            return BulkItemResult(index=index, success=True, item=item, response=result.data)

        error = result.error
        logger.warning(
            "bulk.item_failed",
            type_name=type_name,
            index=index,
            code=error.code if error else None,
            error=result.error_message,
        )
        return BulkItemResult(
            index=index,
            success=False,
            item=item,
            error_message=result.error_message,
            error_code=error.code if error else None,
        )

    async def run(
        self,
        type_name: str,
        operation: BulkOperation | str,
        items: Sequence[Any],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> BulkRunResult:
        """Process every item and collect a :class:`BulkRunResult`."""
        run = BulkRunResult(type_name=type_name, operation=BulkOperation(operation))
        async for item_result in self.iter_results(type_name, operation, items, batch_size):
            run.results.append(item_result)
        run.batches = self._batches
        run.delays = self._delays
        logger.info(
            "bulk.summary",
            type_name=type_name,
            succeeded=run.successful_count,
            failed=run.failed_count,
        )
        return run

    async def run_request(self, type_name: str, request: BulkRequest) -> BulkRunResult:
        return await self.run(type_name, request.operation, request.items, request.batch_size)
