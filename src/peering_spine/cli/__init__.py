"""
CLI layer for peering-spine.

Provides a Typer application whose commands delegate to the registry,
validation, dispatcher and bulk layers.  This package handles only terminal
transport: argument parsing, coloured output, and table formatting.

Entry point::

    peering-spine --help
"""

from peering_spine.cli.app import app

__all__ = ["app"]
