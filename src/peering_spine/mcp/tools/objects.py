"""Per-type write MCP tools.

One tool per registered type and allowed operation, plus one bulk tool per
type::

    peeringdb_create_{type}(data)
    peeringdb_update_{type}(id, data)
    peeringdb_patch_{type}(id, data)
    peeringdb_delete_{type}(id)
    peeringdb_bulk_{type}(operation, items, batch_size=None)

An omitted bulk ``batch_size`` falls back to the ``default_batch_size`` setting.

Tools are generated from the registry at server construction, so a custom
registry file yields a matching tool set.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, assert_never

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError as PydanticValidationError

from peering_spine.bulk import BulkOperation, BulkRequest
from peering_spine.core.logging import LogContext, get_logger
from peering_spine.mcp import _app
from peering_spine.registry import Operation, TypeDescriptor, TypeRegistry

logger = get_logger(__name__)

ToolFn = Callable[..., Awaitable[dict[str, Any]]]

_VERBS = {
    Operation.CREATE: "Create a new {name} in PeeringDB",
    Operation.UPDATE: "Update an existing {name} in PeeringDB (complete replacement)",
    Operation.PATCH: "Partially update an existing {name} in PeeringDB",
    Operation.DELETE: "Delete an existing {name} from PeeringDB",
}


def tool_name(operation: Operation | str, type_name: str) -> str:
    op = operation.value if isinstance(operation, Operation | BulkOperation) else operation
    return f"peeringdb_{op}_{type_name}"


def _describe(descriptor: TypeDescriptor, operation: Operation) -> str:
    text = _VERBS[operation].format(name=descriptor.name.lower())
    match operation:
        case Operation.CREATE | Operation.UPDATE:
            text += f". Required fields: {', '.join(descriptor.required_fields)}"
            if descriptor.optional_fields:
                text += f". Optional fields: {', '.join(descriptor.optional_fields)}"
        case Operation.PATCH:
            text += f". Any of: {', '.join(descriptor.writable_fields)}"
        case Operation.DELETE:
            pass
        case _:
            assert_never(operation)
    return text + "."


def make_write_tool(type_name: str, operation: Operation) -> ToolFn:
    """Build the tool function for one ``(type, operation)`` pair."""

    async def _run(payload: Any) -> dict[str, Any]:
        ctx = _app._get_context()
        result = await ctx.dispatcher.dispatch(type_name, operation, payload)
        return result.to_dict()

    match operation:
        case Operation.CREATE:

            async def create(data: dict[str, Any]) -> dict[str, Any]:
                return await _run(data)

            return create
        case Operation.UPDATE | Operation.PATCH:

            async def update(id: str | int, data: dict[str, Any]) -> dict[str, Any]:
                return await _run({**data, "id": id})

            return update
        case Operation.DELETE:

            async def delete(id: str | int) -> dict[str, Any]:
                return await _run({"id": id})

            return delete
        case _:
            assert_never(operation)


def make_bulk_tool(type_name: str) -> ToolFn:
    """Build the bulk tool function for *type_name*."""

    async def bulk(
        operation: BulkOperation,
        items: list[dict[str, Any]],
        batch_size: int | None = None,
    ) -> dict[str, Any]:
        ctx = _app._get_context()
        if batch_size is None:
            batch_size = ctx.settings.default_batch_size
        try:
            request = BulkRequest(operation=operation, items=items, batch_size=batch_size)
        except PydanticValidationError as e:
            return {"success": False, "error": {"code": "VALIDATION_FAILED", "message": str(e)}}

        async with LogContext(object_type=type_name, bulk_operation=request.operation.value):
            run = await ctx.bulk_processor().run_request(type_name, request)
        return {"success": True, **run.to_dict()}

    return bulk


def register_object_tools(server: FastMCP, registry: TypeRegistry) -> list[str]:
    """Register write and bulk tools for every type in *registry*; return their names."""
    names: list[str] = []
    for type_name, descriptor in registry.items():
        for operation in Operation:
            if not descriptor.supports(operation):
                continue
            name = tool_name(operation, type_name)
            server.add_tool(
                make_write_tool(type_name, operation),
                name=name,
                title=f"{operation.value.capitalize()} {descriptor.name}",
                description=_describe(descriptor, operation),
            )
            names.append(name)

        name = f"peeringdb_bulk_{type_name}"
        server.add_tool(
            make_bulk_tool(type_name),
            name=name,
            title=f"Bulk Operations for {descriptor.name}",
            description=f"Perform bulk operations on {descriptor.description.lower() or descriptor.name}",
        )
        names.append(name)

    logger.debug("mcp.tools_registered", count=len(names))
    return names
