"""
CLI utility helpers: output formatting, payload loading and backend wiring.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from peering_spine.client import Backend, PeeringDBClient
from peering_spine.core.errors import PeeringError
from peering_spine.core.logging import configure_logging
from peering_spine.core.result import OperationResult
from peering_spine.core.settings import PeeringSettings, get_settings
from peering_spine.registry import TypeRegistry, load_registry

console = Console()
err_console = Console(stderr=True)


# ── Wiring ───────────────────────────────────────────────────────────────


def load_settings() -> PeeringSettings:
    settings = get_settings()
    configure_logging(level="DEBUG" if settings.debug else "WARNING", json_format=settings.log_json)
    return settings


def make_registry(settings: PeeringSettings) -> TypeRegistry:
    try:
        return load_registry(settings.registry_file)
    except PeeringError as e:
        fail(e)


def build_backend(settings: PeeringSettings) -> Backend:
    """The backend CLI commands talk to."""
    return PeeringDBClient.from_settings(settings)


# ── Input helpers ────────────────────────────────────────────────────────


def load_payload(raw: str) -> Any:
    """Parse a JSON payload given inline or as ``@path``."""
    text = Path(raw[1:]).read_text(encoding="utf-8") if raw.startswith("@") else raw
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        err_console.print(f"[bold red]Error[/bold red] (INVALID_JSON): {escape(str(e))}")
        raise typer.Exit(code=1) from e


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": obj}


def fail(error: PeeringError) -> NoReturn:
    """Print a :class:`PeeringError` (with field errors) and exit 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.code}): {escape(error.message)}")
    _print_field_errors(error.details().get("field_errors", []))
    raise typer.Exit(code=1)


def _print_field_errors(field_errors: list[dict[str, str]]) -> None:
    for fe in field_errors:
        path = escape(fe["path"] or "<payload>")
        err_console.print(f"  [yellow]{path}[/yellow] {fe['code']}: {escape(fe['message'])}")


def output_json(data: Any) -> None:
    # Plain echo: rich would wrap long lines and break piping into jq.
    typer.echo(json.dumps(data, indent=2, default=str))


def output_result(
    result: OperationResult[Any],
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal."""
    if not result.success:
        err = result.error
        msg = err.message if err else "Unknown error"
        code = err.code if err else "ERROR"
        err_console.print(f"[bold red]Error[/bold red] ({code}): {escape(msg)}")
        if err:
            _print_field_errors(err.details.get("field_errors", []))
        raise typer.Exit(code=1)

    data = result.data

    if as_json:
        output_json(data)
        return

    # PeeringDB wraps every response as {"data": [...], "meta": {...}}
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        data = data["data"]

    if isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        print_table(data, title=title)
    elif data is None:
        console.print("[dim]No content.[/dim]")
    else:
        print_dict(_to_dict(data), title=title)


def print_table(items: list, *, title: str = "", columns: list[str] | None = None) -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    first = _to_dict(items[0])
    cols = columns or list(first)
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in cols:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(escape(str(d.get(c, ""))) for c in cols))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{escape(str(k))}[/cyan]: {escape(str(v))}")
