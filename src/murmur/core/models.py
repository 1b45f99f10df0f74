"""Pydantic models shared by the post and search services.

These are the DTOs that cross every boundary of the core: they are returned
by repositories, serialized into cache entries and rendered by the API.
Field names are camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Post(CamelModel):
    """A post as stored in the source of truth."""

    id: str
    user_id: str
    content: str
    media_ids: list[str] = Field(default_factory=list)
    created_at: datetime


class PostPage(CamelModel):
    """One page of the post collection, newest first."""

    posts: list[Post]
    current_page: int
    total_pages: int
    total_posts: int


class SearchHit(CamelModel):
    """A search projection record, optionally with its relevance score."""

    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime
    score: float | None = None
