"""Core domain models for murmur."""

from murmur.core.models import CamelModel, Post, PostPage, SearchHit

__all__ = [
    "CamelModel",
    "Post",
    "PostPage",
    "SearchHit",
]
