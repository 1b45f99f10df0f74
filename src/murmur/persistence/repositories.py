"""Repository pattern for murmur persistence.

Repositories are long-lived: they hold a session factory and open one
session per operation. Write methods commit before returning, so a caller
that publishes an event after a write returns always publishes a committed
change.

- PostRepository: source of truth of the post service
- SearchPostRepository: search projection, maintained from post events
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from murmur.core.models import Post, SearchHit
from murmur.persistence.tables import SEARCH_CONFIG, PostTable, SearchPostTable

logger = logging.getLogger(__name__)

_SEARCH_TERM = re.compile(r"[^\W_]+")


class DuplicateProjectionError(Exception):
    """Raised when a projection already exists for a post."""

    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__(f"Search projection already exists for post {post_id}")


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _to_post(row: PostTable) -> Post:
    return Post(
        id=str(row.id),
        user_id=row.user_id,
        content=row.content,
        media_ids=list(row.media_ids or []),
        created_at=row.created_at,
    )


def _to_hit(row: SearchPostTable, score: float | None = None) -> SearchHit:
    return SearchHit(
        id=str(row.id),
        post_id=row.post_id,
        user_id=row.user_id,
        content=row.content,
        created_at=row.created_at,
        score=score,
    )


class BaseRepository:
    """Base repository holding the injected session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory


class PostRepository(BaseRepository):
    """Repository for post operations."""

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    async def find_by_id(self, post_id: str) -> Post | None:
        """Get a post by id, or None. Malformed ids are never found."""
        if not _is_uuid(post_id):
            return None
        async with self.session_factory() as session:
            row = await session.get(PostTable, post_id)
            return _to_post(row) if row is not None else None

    async def find_page(self, skip: int, limit: int) -> list[Post]:
        """Get a window of posts, newest first."""
        stmt = (
            select(PostTable)
            .order_by(PostTable.created_at.desc(), PostTable.id.desc())
            .offset(skip)
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [_to_post(row) for row in result.scalars()]

    async def count(self) -> int:
        """Total number of posts."""
        async with self.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(PostTable))
            return int(result.scalar_one())

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    async def insert(self, user_id: str, content: str, media_ids: list[str]) -> Post:
        """Create a post and commit it."""
        row = PostTable(user_id=user_id, content=content, media_ids=list(media_ids))
        async with self.session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _to_post(row)

    async def find_delete_by_id(self, post_id: str, user_id: str) -> Post | None:
        """Delete a post owned by user_id and commit.

        Returns:
            The deleted post, or None if no post with that id belongs to
            user_id.
        """
        if not _is_uuid(post_id):
            return None
        stmt = (
            delete(PostTable)
            .where(PostTable.id == post_id, PostTable.user_id == user_id)
            .returning(PostTable)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            post = _to_post(row) if row is not None else None
            await session.commit()
            return post


class SearchPostRepository(BaseRepository):
    """Repository for the search projection."""

    async def insert(
        self,
        post_id: str,
        user_id: str,
        content: str,
        created_at: datetime,
    ) -> SearchHit:
        """Create the projection of a post and commit it.

        Raises:
            DuplicateProjectionError: If the post already has a projection
        """
        row = SearchPostTable(
            post_id=post_id,
            user_id=user_id,
            content=content,
            created_at=created_at,
        )
        async with self.session_factory() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateProjectionError(post_id) from e
            await session.refresh(row)
            return _to_hit(row)

    async def find_delete_by_post_id(self, post_id: str) -> SearchHit | None:
        """Delete the projection of a post and commit. Returns it, or None."""
        stmt = (
            delete(SearchPostTable)
            .where(SearchPostTable.post_id == post_id)
            .returning(SearchPostTable)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            hit = _to_hit(row) if row is not None else None
            await session.commit()
            return hit

    async def find_by_relevance(self, query: str, top_n: int) -> list[SearchHit]:
        """Full-text search over the projection.

        Any term may match; hits are ordered by relevance, most relevant
        first, then newest first.
        """
        terms = _SEARCH_TERM.findall(query.lower())
        if not terms:
            return []

        document = func.to_tsvector(SEARCH_CONFIG, SearchPostTable.content)
        ts_query = func.to_tsquery(SEARCH_CONFIG, " | ".join(terms))
        score = func.ts_rank(document, ts_query).label("score")
        stmt = (
            select(SearchPostTable, score)
            .where(document.op("@@")(ts_query))
            .order_by(score.desc(), SearchPostTable.created_at.desc())
            .limit(top_n)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [_to_hit(row, float(row_score)) for row, row_score in result.all()]
