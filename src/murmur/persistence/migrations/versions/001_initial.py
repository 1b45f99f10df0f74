"""Initial schema for murmur.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

Creates tables for:
- posts: posts (source of truth of the post service)
- search_posts: search projection, with a GIN full-text index on content
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Posts table
    op.create_table(
        "posts",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "media_ids",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_posts_user_id", "posts", ["user_id"])
    op.create_index("idx_posts_created_at", "posts", [sa.text("created_at DESC")])

    # Search projection table
    op.create_table(
        "search_posts",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column("post_id", sa.Text(), nullable=False, unique=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_search_posts_content_fts",
        "search_posts",
        [sa.text("to_tsvector('english', content)")],
        postgresql_using="gin",
    )
    op.create_index(
        "idx_search_posts_created_at", "search_posts", [sa.text("created_at DESC")]
    )


def downgrade() -> None:
    op.drop_index("idx_search_posts_created_at", table_name="search_posts")
    op.drop_index("idx_search_posts_content_fts", table_name="search_posts")
    op.drop_table("search_posts")

    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_index("ix_posts_user_id", table_name="posts")
    op.drop_table("posts")
