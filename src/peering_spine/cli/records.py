"""
CLI: resource identifiers, reads and writes against PeeringDB.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import typer
from rich.markup import escape

from peering_spine.bulk import BulkBatchProcessor, BulkOperation, BulkRunResult
from peering_spine.cli.utils import (
    build_backend,
    console,
    fail,
    load_payload,
    load_settings,
    make_registry,
    output_json,
    output_result,
    print_dict,
    print_table,
)
from peering_spine.core.errors import PeeringError
from peering_spine.core.settings import PeeringSettings
from peering_spine.dispatch import OperationDispatcher
from peering_spine.validation.identifiers import parse_identifier


def _with_dispatcher[T](
    settings: PeeringSettings,
    work: Callable[[OperationDispatcher], Awaitable[T]],
) -> T:
    registry = make_registry(settings)
    backend = build_backend(settings)

    async def _run() -> T:
        try:
            return await work(OperationDispatcher(registry, backend, scheme=settings.resource_scheme))
        finally:
            aclose = getattr(backend, "aclose", None)
            if aclose is not None:
                await aclose()

    return asyncio.run(_run())


def parse(
    uri: str = typer.Argument(..., help="Resource identifier, e.g. peeringdb://net/694"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Parse a resource identifier without fetching it."""
    settings = load_settings()
    registry = make_registry(settings)
    try:
        ref = parse_identifier(uri, registry, scheme=settings.resource_scheme)
    except PeeringError as e:
        fail(e)

    data: dict[str, Any] = {
        "object_type": ref.object_type,
        "id": ref.id,
        "is_search": ref.is_search,
        "filters": dict(ref.filters),
        "uri": ref.to_uri(),
    }
    if json_out:
        output_json(data)
        return
    print_dict(data, title="Resource")


def query(
    uri: str = typer.Argument(..., help="Resource identifier, e.g. peeringdb://net?asn=694"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Fetch an object, collection or search by resource identifier."""
    settings = load_settings()
    result = _with_dispatcher(settings, lambda d: d.fetch_uri(uri))
    output_result(result, as_json=json_out, title=uri)


def apply(
    object_type: str = typer.Argument(..., help="Object type, e.g. net"),
    operation: str = typer.Argument(..., help="create | update | patch | delete"),
    payload: str = typer.Argument(..., help="JSON object, or @path to a JSON file"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Validate a payload and send it to PeeringDB."""
    settings = load_settings()
    data = load_payload(payload)
    result = _with_dispatcher(settings, lambda d: d.dispatch(object_type, operation, data))
    output_result(result, as_json=json_out, title=f"{operation} {object_type}")


def bulk(
    object_type: str = typer.Argument(..., help="Object type, e.g. netixlan"),
    operation: BulkOperation = typer.Argument(..., help="create | update | delete"),
    items: str = typer.Argument(..., help="JSON array, or @path to a JSON file"),
    batch_size: int = typer.Option(0, "--batch-size", "-b", help="Items per batch (default from settings)"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run one operation over many items, throttled between batches."""
    settings = load_settings()
    data = load_payload(items)
    if not isinstance(data, list):
        raise typer.BadParameter("items must be a JSON array")
    size = batch_size or settings.default_batch_size

    def _run(dispatcher: OperationDispatcher) -> Awaitable[BulkRunResult]:
        processor = BulkBatchProcessor(dispatcher, delay_seconds=settings.batch_delay_seconds)
        return processor.run(object_type, operation, data, size)

    try:
        run = _with_dispatcher(settings, _run)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    if json_out:
        output_json(run.to_dict())
    else:
        console.print(
            f"Bulk {operation.value} completed for {escape(object_type)}: "
            f"[green]{run.successful_count} successful[/green], "
            f"[red]{run.failed_count} failed[/red]"
        )
        if run.results:
            print_table(
                [
                    {
                        "index": r.index,
                        "success": r.success,
                        "result": r.error_message if not r.success else "ok",
                    }
                    for r in run.results
                ]
            )
    if run.failed_count:
        raise typer.Exit(code=1)
