"""MCP transport scaffold for AI-callable peering-spine services.

Modules
-------
mcp     create_spine_mcp() + run_spine_mcp() factory functions

Tags:
    peering-spine, mcp, transport, ai-callable, protocol, factory

Doc-Types:
    package-overview
"""
