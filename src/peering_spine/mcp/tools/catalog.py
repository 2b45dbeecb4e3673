"""Read and discovery MCP tools."""

from __future__ import annotations

from typing import Any

from peering_spine.mcp import _app

mcp = _app.mcp


@mcp.tool()
async def peeringdb_get(uri: str) -> dict[str, Any]:
    """Read a PeeringDB object, collection or search by resource URI.

    Args:
        uri: Resource URI, e.g. ``peeringdb://net/694``,
            ``peeringdb://net?asn__in=694,3356`` or
            ``peeringdb://fac/search?name__contains=Equinix``

    Returns:
        Result envelope with the backend response under ``data``
    """
    ctx = _app._get_context()
    result = await ctx.dispatcher.fetch_uri(uri)
    return result.to_dict()


@mcp.tool()
async def peeringdb_list_types() -> dict[str, Any]:
    """List the registered PeeringDB object types and their allowed operations."""
    ctx = _app._get_context()
    return {
        "types": [
            {
                "type": type_name,
                "name": descriptor.name,
                "description": descriptor.description,
                "operations": descriptor.to_dict()["allowed_operations"],
            }
            for type_name, descriptor in ctx.registry.items()
        ],
        "total": len(ctx.registry),
        "version": _app._get_version(),
    }


@mcp.tool()
async def peeringdb_describe_type(object_type: str) -> dict[str, Any]:
    """Describe one object type: fields, relationships and payload schemas.

    Args:
        object_type: Registry type name (org, fac, ix, net, poc, ixlan, ixpfx, netixlan, netfac)

    Returns:
        Descriptor plus a JSON schema per allowed operation
    """
    from peering_spine.core.errors import UnknownTypeError
    from peering_spine.registry import Operation
    from peering_spine.validation.schema import build_schema

    ctx = _app._get_context()
    try:
        descriptor = ctx.registry.lookup(object_type)
    except UnknownTypeError as e:
        return {"error": e.message, "code": e.code}

    return {
        **descriptor.to_dict(),
        "schemas": {
            op.value: build_schema(descriptor, op).json_schema()
            for op in Operation
            if descriptor.supports(op)
        },
    }
