"""MCP server scaffold for peering-spine.

The server module only needs to:

1. Define a lifespan that yields its ``AppContext``
2. Register tools/resources on the returned ``FastMCP`` instance
3. Call ``run()`` from its console script entry point

Usage::

    from peering_spine.core.transports.mcp import create_spine_mcp, run_spine_mcp

    mcp = create_spine_mcp(
        name="peering-spine",
        instructions="Validated writes against PeeringDB ...",
        lifespan=app_lifespan,
    )

    @mcp.tool()
    async def peeringdb_list_types(): ...

    def run():
        run_spine_mcp(mcp, default_port=8110)
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from peering_spine.core.logging import configure_logging, get_logger


def create_spine_mcp(
    name: str,
    instructions: str,
    lifespan: Callable[..., Any],
) -> FastMCP:
    """Create a FastMCP server instance.

    Parameters
    ----------
    name : str
        MCP server name (e.g. "peering-spine").
    instructions : str
        Natural language description of the server's capabilities.
    lifespan : async context manager
        Lifespan factory that yields an AppContext dataclass.
    """
    return FastMCP(
        name,
        instructions=instructions,
        lifespan=lifespan,
    )


def parse_transport_args(argv: Sequence[str], default_port: int) -> tuple[str, int]:
    """Return ``(transport, port)`` from ``--transport``/``-t`` and ``--port``/``-p``."""
    transport = "stdio"
    port = default_port
    args = list(argv)

    i = 0
    while i < len(args):
        if args[i] in ("--transport", "-t") and i + 1 < len(args):
            transport = args[i + 1]
            i += 2
        elif args[i] in ("--port", "-p") and i + 1 < len(args):
            port = int(args[i + 1])
            i += 2
        else:
            i += 1
    return transport, port


def run_spine_mcp(
    mcp: FastMCP,
    *,
    default_port: int = 8000,
    host: str = "0.0.0.0",
    log_name: str | None = None,
    log_level: str = "INFO",
    transport: str | None = None,
    port: int | None = None,
) -> None:
    """Start *mcp* in stdio or streamable-http mode.

    ``transport`` and ``port`` default to what ``sys.argv`` says (see
    :func:`parse_transport_args`).  Logs always go to stderr so that stdio
    framing stays clean.
    """
    argv_transport, argv_port = parse_transport_args(sys.argv[1:], default_port)
    transport = transport or argv_transport
    port = port or argv_port

    name = log_name or mcp.name
    configure_logging(level=log_level, service=name)
    logger = get_logger(name)

    if transport in ("http", "streamable-http"):
        mcp.settings.host = host
        mcp.settings.port = port
        logger.info("mcp.start", transport="streamable-http", host=host, port=port)
        mcp.run(transport="streamable-http")
    else:
        logger.info("mcp.start", transport="stdio")
        mcp.run(transport="stdio")
