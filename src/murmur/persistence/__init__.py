"""Persistence layer: PostgreSQL via SQLAlchemy asyncio + asyncpg."""

from murmur.persistence.db import create_engine, create_session_factory, health_check, init_db
from murmur.persistence.repositories import (
    DuplicateProjectionError,
    PostRepository,
    SearchPostRepository,
)
from murmur.persistence.tables import Base, PostTable, SearchPostTable

__all__ = [
    "create_engine",
    "create_session_factory",
    "init_db",
    "health_check",
    "Base",
    "PostTable",
    "SearchPostTable",
    "PostRepository",
    "SearchPostRepository",
    "DuplicateProjectionError",
]
