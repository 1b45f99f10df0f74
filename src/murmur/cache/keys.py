"""Cache key schema for murmur.

Key format: {namespace}:{discriminator}

Where:
- namespace: "post" (single post), "posts" (paginated collection),
  "search" (search results)
- discriminator: post id, "{page}:{limit}" or the raw query string

Collection and search keys are never tracked individually; writers purge
everything under the namespace prefix (see CacheInvalidationPolicy).
"""

from __future__ import annotations


class CacheKeys:
    """Cache key generator following a consistent naming convention."""

    POST = "post"
    POSTS = "posts"
    SEARCH = "search"

    @classmethod
    def post(cls, post_id: str) -> str:
        """Key for a single post."""
        return f"{cls.POST}:{post_id}"

    @classmethod
    def posts_page(cls, page: int, limit: int) -> str:
        """Key for one page of the post collection."""
        return f"{cls.POSTS}:{page}:{limit}"

    @classmethod
    def search(cls, query: str) -> str:
        """Key for the results of a search query."""
        return f"{cls.SEARCH}:{query}"

    @classmethod
    def prefix(cls, namespace: str) -> str:
        """Prefix shared by every key of a namespace."""
        return f"{namespace}:"
