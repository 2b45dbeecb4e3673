"""
CLI: registry inspection and offline payload validation.

``types``, ``describe``, ``schema`` and ``validate`` never touch the network.
"""

from __future__ import annotations

import typer

from peering_spine.cli.utils import (
    console,
    fail,
    load_payload,
    load_settings,
    make_registry,
    output_json,
    print_dict,
    print_table,
)
from peering_spine.core.errors import PeeringError
from peering_spine.registry import Operation
from peering_spine.validation.fields import synthesize
from peering_spine.validation.schema import build_schema, validate_payload


def _parse_operation(value: str) -> Operation:
    try:
        return Operation.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def types(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List registered object types."""
    registry = make_registry(load_settings())
    rows = [
        {
            "type": name,
            "name": d.name,
            "required": ", ".join(d.required_fields),
            "operations": ", ".join(op.value for op in Operation if d.supports(op)),
        }
        for name, d in registry.items()
    ]
    if json_out:
        output_json(rows)
        return
    print_table(rows, title="Object types")


def describe(
    object_type: str = typer.Argument(..., help="Object type, e.g. net"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the fields, relationships and field rules of one type."""
    registry = make_registry(load_settings())
    try:
        descriptor = registry.lookup(object_type)
    except PeeringError as e:
        fail(e)

    rules = [synthesize(f, required=f in descriptor.required_fields) for f in descriptor.writable_fields]
    if json_out:
        output_json({**descriptor.to_dict(), "fields": [r.to_dict() for r in rules]})
        return

    print_dict(
        {
            "name": descriptor.name,
            "description": descriptor.description,
            "relationships": ", ".join(descriptor.relationships) or "-",
            "operations": ", ".join(op.value for op in Operation if descriptor.supports(op)),
        },
        title=descriptor.endpoint,
    )
    print_table(
        [
            {
                "field": r.name,
                "kind": r.kind.value,
                "required": "yes" if r.required else "",
                "constraint": ", ".join(r.choices) or r.description,
            }
            for r in rules
        ],
    )


def schema(
    object_type: str = typer.Argument(..., help="Object type, e.g. net"),
    operation: str = typer.Argument("create", help="create | update | patch | delete"),
) -> None:
    """Print the JSON schema of a payload."""
    op = _parse_operation(operation)
    registry = make_registry(load_settings())
    try:
        descriptor = registry.lookup(object_type)
    except PeeringError as e:
        fail(e)
    output_json(build_schema(descriptor, op).json_schema())


def validate(
    object_type: str = typer.Argument(..., help="Object type, e.g. net"),
    operation: str = typer.Argument(..., help="create | update | patch | delete"),
    payload: str = typer.Argument(..., help="JSON object, or @path to a JSON file"),
) -> None:
    """Validate a payload without sending it."""
    op = _parse_operation(operation)
    registry = make_registry(load_settings())
    data = load_payload(payload)
    try:
        validated = validate_payload(registry.lookup(object_type), op, data)
    except PeeringError as e:
        fail(e)
    console.print(f"[bold green]Valid[/bold green] {object_type} {op.value} payload")
    output_json(validated)
