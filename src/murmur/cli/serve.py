"""CLI command for running the API server.

Usage:
    murmur serve
    murmur serve --port 3002 --host 0.0.0.0
    murmur serve --reload --log-level debug
"""

from __future__ import annotations

import typer

from murmur.config import settings

app = typer.Typer(help="Run the murmur API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(settings.host, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
    access_log: bool = typer.Option(
        True,
        "--access-log/--no-access-log",
        help="Enable/disable access logging",
    ),
) -> None:
    """Run the murmur API server.

    One worker per process: the event consumers of the search role run
    inside the server process.
    """
    import uvicorn

    typer.echo("Starting murmur server...")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Role: {settings.service_role}")
    typer.echo(f"  Event bus: {settings.event_bus_backend}")
    typer.echo()

    uvicorn.run(
        app="murmur.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
        access_log=access_log,
    )
