"""peering-spine MCP Server.

Model Context Protocol (MCP) server exposing validated PeeringDB writes,
bulk operations and URI-addressed reads as AI-callable tools.

Usage::

    # stdio mode (default)
    peering-spine-mcp

    # HTTP mode
    peering-spine-mcp --transport http --port 8110
"""

from peering_spine.mcp.server import create_server, mcp, run

__all__ = [
    "create_server",
    "mcp",
    "run",
]
