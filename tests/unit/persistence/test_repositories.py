"""Tests for repository behavior that needs no database round trip."""

from unittest.mock import MagicMock

from murmur.persistence.repositories import (
    DuplicateProjectionError,
    PostRepository,
    SearchPostRepository,
)


class TestPostRepository:
    async def test_malformed_id_is_not_found(self) -> None:
        session_factory = MagicMock()
        repo = PostRepository(session_factory)

        assert await repo.find_by_id("not-a-uuid") is None
        assert await repo.find_delete_by_id("not-a-uuid", "u1") is None
        session_factory.assert_not_called()


class TestSearchPostRepository:
    async def test_query_without_terms_matches_nothing(self) -> None:
        session_factory = MagicMock()
        repo = SearchPostRepository(session_factory)

        assert await repo.find_by_relevance("?! -- &&", 10) == []
        session_factory.assert_not_called()


class TestDuplicateProjectionError:
    def test_carries_post_id(self) -> None:
        error = DuplicateProjectionError("p1")
        assert error.post_id == "p1"
        assert "p1" in str(error)
