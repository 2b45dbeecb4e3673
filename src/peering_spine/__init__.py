"""
peering-spine - registry-driven validation and routing for PeeringDB writes.

Packages:
- peering_spine.core: errors, logging, settings, result envelopes, MCP scaffold
- peering_spine.validation: field rules, object schemas, query filters, identifiers
- peering_spine.mcp: MCP server exposing per-type tools and resources
- peering_spine.cli: Typer command line
"""

__version__ = "0.1.0"
