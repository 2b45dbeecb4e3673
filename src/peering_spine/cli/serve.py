"""
CLI: ``peering-spine serve`` - start the MCP server.
"""

from __future__ import annotations

import typer

from peering_spine.cli.utils import err_console


def serve(
    transport: str = typer.Option("stdio", "--transport", "-t", help="stdio | http"),
    host: str | None = typer.Option(None, "--host", help="Bind address (http only)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (http only)"),
) -> None:
    """Start the peering-spine MCP server."""
    from peering_spine.core.settings import get_settings
    from peering_spine.core.transports.mcp import run_spine_mcp
    from peering_spine.mcp.server import mcp

    if transport not in ("stdio", "http", "streamable-http"):
        raise typer.BadParameter(f"Unknown transport: {transport}")

    settings = get_settings()
    # stdout belongs to the MCP framing in stdio mode
    err_console.print(f"[bold green]Starting peering-spine MCP[/bold green] ({transport})")
    run_spine_mcp(
        mcp,
        default_port=settings.port,
        host=host or settings.host,
        log_name="peering-spine-mcp",
        log_level=settings.log_level,
        transport=transport,
        port=port or settings.port,
    )
