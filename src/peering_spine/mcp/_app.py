"""Shared MCP application state: server instance, context, helpers.

Tags: mcp, server, internal
Doc-Types: TECHNICAL_DESIGN
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from peering_spine.bulk import BulkBatchProcessor
from peering_spine.client import PeeringDBClient
from peering_spine.core.logging import get_logger
from peering_spine.core.settings import PeeringSettings, get_settings
from peering_spine.core.transports.mcp import create_spine_mcp
from peering_spine.dispatch import OperationDispatcher
from peering_spine.registry import TypeRegistry, load_registry

logger = get_logger("peering_spine.mcp")


@dataclass
class AppContext:
    """Application context for the MCP server."""

    settings: PeeringSettings
    registry: TypeRegistry
    client: PeeringDBClient
    dispatcher: OperationDispatcher

    def bulk_processor(self) -> BulkBatchProcessor:
        """A fresh processor per bulk call; processors carry per-run state."""
        return BulkBatchProcessor(self.dispatcher, delay_seconds=self.settings.batch_delay_seconds)


def build_context(settings: PeeringSettings, registry: TypeRegistry | None = None) -> AppContext:
    registry = registry or load_registry(settings.registry_file)
    client = PeeringDBClient.from_settings(settings)
    dispatcher = OperationDispatcher(registry, client, scheme=settings.resource_scheme)
    if not client.has_api_key:
        logger.warning("mcp.no_api_key", detail="API key not configured. Write operations will fail.")
    return AppContext(settings=settings, registry=registry, client=client, dispatcher=dispatcher)


_context: AppContext | None = None


@lru_cache
def _get_registry() -> TypeRegistry:
    """Registry used to decide which tools to register."""
    return load_registry(get_settings().registry_file)


def _get_context() -> AppContext:
    """Get (and lazily build) the process-wide MCP context."""
    global _context
    if _context is None:
        _context = build_context(get_settings(), _get_registry())
    return _context


@asynccontextmanager
async def lifespan(server: Any = None) -> AsyncIterator[AppContext]:
    """MCP server lifespan manager."""
    global _context
    ctx = _get_context()
    logger.info("mcp.initialized", types=len(ctx.registry), base_url=ctx.client.base_url)
    try:
        yield ctx
    finally:
        await ctx.client.aclose()
        _context = None


# Create MCP server instance
mcp = create_spine_mcp(
    name="peering-spine",
    instructions="""
peering-spine: validated writes against PeeringDB.

Capabilities:
- Create, update, patch and delete organizations, facilities, exchanges,
  networks, contacts, IX LANs, IX prefixes and network presences
- Bulk create/update/delete with per-item results
- Read any object, collection or search by resource URI
  (peeringdb://net/694, peeringdb://net?asn__in=694,3356)
- Describe the writable fields of every object type

Every payload is validated before it is sent.  Writes require an API key
(PEERINGDB_API_KEY).
""",
    lifespan=lifespan,
)


def _get_version() -> str:
    from peering_spine import __version__

    return __version__
