"""CLI commands for murmur.

Provides command-line interface using Typer:
- murmur serve: Run the API server
- murmur init-db: Create the database tables

Usage:
    murmur --help
    murmur serve --port 3002
"""

import typer

from murmur.cli.init_db import app as init_db_app
from murmur.cli.serve import app as serve_app

# Main CLI application
app = typer.Typer(
    name="murmur",
    help="murmur: post and search services",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(init_db_app, name="init-db")


@app.callback()
def callback() -> None:
    """murmur: post and search services."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
