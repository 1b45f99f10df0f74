"""API routers for murmur."""

from murmur.api.routers import health, posts, search

__all__ = ["health", "posts", "search"]
