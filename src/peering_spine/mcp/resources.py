"""MCP resources: read access by resource URI.

Two templates are registered::

    {scheme}://{object_type}         collection (query string allowed)
    {scheme}://{object_type}/{id}    instance, or ``search`` with a query string

URI template parameters match a single path segment, so any query string
arrives attached to the last parameter; the full URI is rebuilt and handed
to the identifier parser.
"""

from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from peering_spine.core.errors import PeeringError
from peering_spine.mcp import _app


async def _read(uri: str) -> str:
    ctx = _app._get_context()
    result = await ctx.dispatcher.fetch_uri(uri)
    if not result.success:
        raise PeeringError(result.error_message or f"Failed to read {uri}")
    return json.dumps(result.data, indent=2)


def register_resources(server: FastMCP, scheme: str) -> None:
    @server.resource(
        f"{scheme}://{{object_type}}",
        name="peeringdb_collection",
        title="PeeringDB Collection",
        description="List or filter objects of one type",
        mime_type="application/json",
    )
    async def read_collection(object_type: str) -> str:
        return await _read(f"{scheme}://{object_type}")

    @server.resource(
        f"{scheme}://{{object_type}}/{{id}}",
        name="peeringdb_object",
        title="PeeringDB Object",
        description="One object by id, or a search (``/search?...``)",
        mime_type="application/json",
    )
    async def read_object(object_type: str, id: str) -> str:
        return await _read(f"{scheme}://{object_type}/{id}")
