"""restlinks CLI: serve and inspect the demo resources.

Entry point registered in pyproject.toml:
    restlinks = "restlinks.cli:app"

Commands:
    restlinks serve    serve the demo book/library API with uvicorn
    restlinks routes   print the route table of the demo API
    restlinks openapi  write the demo API's OpenAPI document to a file

Usage:
    restlinks --help
    restlinks serve --port 9000
    restlinks openapi -o build/openapi.json
    RESTLINKS_PORT=9000 restlinks serve
"""

import typer

from restlinks.cli.demo import openapi, routes, serve

app = typer.Typer(
    name="restlinks",
    help="restlinks CLI: hyperlinked REST resources over in-memory records",
    no_args_is_help=True,
)

app.command()(serve)
app.command()(routes)
app.command()(openapi)
