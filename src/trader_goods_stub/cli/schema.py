import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from trader_goods_stub.config import get_settings
from trader_goods_stub.core.schemas import SchemaMalformedError, SchemaNotFoundError, SchemaRegistry
from trader_goods_stub.core.validation import validate

schema_app = typer.Typer(help="Inspect the request schemas and check documents against them.")
console = Console()

SchemaDirOption = Annotated[
    Path | None, typer.Option("--schema-dir", help="Directory of *.json schemas (defaults to the bundled ones).")
]


def _registry(schema_dir: Path | None) -> SchemaRegistry:
    return SchemaRegistry(schema_dir or get_settings().schema_dir)


@schema_app.command("list")
def list_schemas(schema_dir: SchemaDirOption = None) -> None:
    """List the available schemas."""
    registry = _registry(schema_dir)
    for name in registry.names():
        console.print(name)


@schema_app.command("validate")
def validate_document(
    name: Annotated[str, typer.Argument(help="Schema name, e.g. tgp-create-record-request-v0.7.json.")],
    document: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="JSON file to check.")],
    schema_dir: SchemaDirOption = None,
) -> None:
    """Validate a JSON document against a named schema."""
    registry = _registry(schema_dir)
    try:
        schema = registry.get(name)
    except (SchemaNotFoundError, SchemaMalformedError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2) from exc

    try:
        payload = json.loads(document.read_text(encoding="utf-8"))
    except ValueError as exc:
        console.print(f"[red]{document} is not valid JSON: {exc}[/red]")
        raise typer.Exit(1) from exc

    errors = validate(schema, payload)
    if not errors:
        console.print(f"[green]{document} is valid against {name}[/green]")
        return

    table = Table(title=f"{len(errors)} validation error(s)")
    table.add_column("location")
    table.add_column("message")
    for error in errors:
        table.add_row(error.location, error.message)
    console.print(table)
    raise typer.Exit(1)
