"""CLI commands for the demo book/library API.

Defaults for every option come from ``restlinks.config.settings``, so
``RESTLINKS_HOST`` / ``RESTLINKS_PORT`` / ``RESTLINKS_LOG_LEVEL`` work as well
as the flags.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from restlinks.api.server import create_app
from restlinks.config import settings
from restlinks.examples.library import build_registry

# Module-level console used by the commands
console = Console()


def serve(
    host: str = typer.Option(settings.host, "--host", help="Interface to bind."),
    port: int = typer.Option(settings.port, "--port", help="Port to listen on."),
    log_level: str = typer.Option(settings.log_level, "--log-level", help="uvicorn log level."),
) -> None:
    """Serve the demo book/library API."""
    app = create_app(build_registry())
    console.print(f"[green]Serving demo API on http://{host}:{port}/[/green]")
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def routes() -> None:
    """Print the route table of the demo API."""
    schema = create_app(build_registry()).openapi()

    table = Table(title="restlinks demo routes")
    table.add_column("Method", style="cyan")
    table.add_column("Path")
    table.add_column("Operation", style="dim")
    for path, operations in schema.get("paths", {}).items():
        for method, operation in operations.items():
            table.add_row(method.upper(), path, operation.get("operationId", ""))
    console.print(table)


def openapi(
    output: Path = typer.Option(
        Path("openapi.json"), "--output", "-o", help="File to write the document to."
    ),
    indent: int = typer.Option(2, "--indent", help="JSON indentation."),
) -> None:
    """Write the demo API's OpenAPI document to a JSON file."""
    schema = create_app(build_registry()).openapi()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(schema, indent=indent) + "\n", encoding="utf-8")
    console.print(f"[green]OpenAPI document written to {output}[/green]")
    console.print(f"Paths: {', '.join(schema.get('paths', {}))}")
