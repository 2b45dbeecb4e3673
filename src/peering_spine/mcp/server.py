"""peering-spine MCP Server Implementation.

Exposes validated PeeringDB writes, bulk operations and URI-addressed reads
as MCP tools and resources.

Shared state lives in `peering_spine.mcp._app`; static tools in
`peering_spine.mcp.tools.catalog`; per-type tools are generated from the
registry by `peering_spine.mcp.tools.objects`.

Tags: mcp, server, ai-tools, peeringdb, protocol
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
"""

from __future__ import annotations

from peering_spine.core.settings import get_settings
from peering_spine.core.transports.mcp import run_spine_mcp
from peering_spine.mcp._app import (  # noqa: F401
    AppContext,
    _get_context,
    _get_registry,
    _get_version,
    build_context,
    lifespan,
    mcp,
)
from peering_spine.mcp.resources import register_resources

# Import tools to trigger @mcp.tool() registration
from peering_spine.mcp.tools.catalog import (  # noqa: F401
    peeringdb_describe_type,
    peeringdb_get,
    peeringdb_list_types,
)
from peering_spine.mcp.tools.objects import register_object_tools

OBJECT_TOOLS = register_object_tools(mcp, _get_registry())
register_resources(mcp, get_settings().resource_scheme)


def create_server():
    """Create and return the MCP server instance."""
    return mcp


def run():
    """Run the MCP server (entry point for console script)."""
    settings = get_settings()
    run_spine_mcp(
        mcp,
        default_port=settings.port,
        host=settings.host,
        log_name="peering-spine-mcp",
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
