"""CLI command creating the database tables.

Usage:
    murmur init-db
"""

from __future__ import annotations

import asyncio

import typer

from murmur.config import settings
from murmur.persistence.db import create_engine, init_db

app = typer.Typer(help="Create the database tables")


async def _init() -> None:
    engine = create_engine(settings)
    try:
        await init_db(engine)
    finally:
        await engine.dispose()


@app.callback(invoke_without_command=True)
def run() -> None:
    """Create missing tables. Use Alembic migrations for production databases."""
    asyncio.run(_init())
    typer.echo("Database tables created")
