"""MCP tools package.

``catalog`` registers its tools with ``@mcp.tool()`` on import; ``objects``
generates per-type tools from a registry via ``register_object_tools``.
"""

from peering_spine.mcp.tools import catalog, objects  # noqa: F401
