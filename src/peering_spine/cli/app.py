"""
Root Typer application for the peering-spine CLI.

The MCP server is imported lazily by ``serve`` so that registry and payload
commands start without the MCP SDK.
"""

from __future__ import annotations

import typer
from typer import Typer

from peering_spine.cli.catalog import describe, schema, types, validate
from peering_spine.cli.records import apply, bulk, parse, query
from peering_spine.cli.serve import serve

app = Typer(
    name="peering-spine",
    help="peering-spine: validated writes and reads against PeeringDB.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("peering-spine")
        except PackageNotFoundError:
            from peering_spine import __version__ as v
        typer.echo(f"peering-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """peering-spine CLI: inspect object types, validate payloads, read and write PeeringDB."""


# ── Commands ─────────────────────────────────────────────────────────────

app.command("types")(types)
app.command("describe")(describe)
app.command("schema")(schema)
app.command("validate")(validate)
app.command("parse")(parse)
app.command("query")(query)
app.command("apply")(apply)
app.command("bulk")(bulk)
app.command("serve")(serve)


if __name__ == "__main__":
    app()
