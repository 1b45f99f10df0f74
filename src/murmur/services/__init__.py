"""Application services of the post and search services."""

from murmur.services.posts import PostNotFoundError, PostService
from murmur.services.search import SearchService

__all__ = ["PostService", "PostNotFoundError", "SearchService"]
