"""SQLAlchemy ORM models for murmur persistence.

Two tables, each owned by exactly one service:
- posts: source of truth of the post service
- search_posts: read projection of the search service, written only by the
  event consumer
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Index, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Text search configuration used by the projection index and queries
SEARCH_CONFIG = "english"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class PostTable(Base):
    """Post table."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid4())
    )

    # Owner (identity forwarded by the gateway)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Ids of media owned by the media service
    media_ids: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        # Newest-first pagination
        Index("idx_posts_created_at", created_at.desc()),
    )


class SearchPostTable(Base):
    """Search projection of posts.

    One row per post; the unique post_id turns a redelivered post.created
    into a constraint violation instead of a duplicate.
    """

    __tablename__ = "search_posts"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid4())
    )

    post_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    user_id: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # GIN index for full-text search on content
        Index(
            "idx_search_posts_content_fts",
            func.to_tsvector(SEARCH_CONFIG, content),
            postgresql_using="gin",
        ),
        Index("idx_search_posts_created_at", created_at.desc()),
    )
