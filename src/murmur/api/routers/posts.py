"""Post endpoints.

- POST   /api/posts            create a post (owner from x-user-id)
- GET    /api/posts            one page of posts, newest first
- GET    /api/posts/{post_id}  a single post
- DELETE /api/posts/{post_id}  delete an owned post
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Query, status
from pydantic import Field

from murmur.api.deps import PostServiceDep, UserIdDep
from murmur.api.errors import NotFoundError
from murmur.core.models import CamelModel
from murmur.services.posts import PostNotFoundError

router = APIRouter(prefix="/api/posts", tags=["posts"])

MAX_PAGE_SIZE = 100


class CreatePostRequest(CamelModel):
    content: str = Field(min_length=3, max_length=5000)
    media_ids: list[str] = Field(default_factory=list)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    body: CreatePostRequest, user_id: UserIdDep, service: PostServiceDep
) -> dict[str, Any]:
    post = await service.create_post(user_id, body.content, body.media_ids)
    return {
        "success": True,
        "message": "Post created successfully",
        "post": post.model_dump(mode="json", by_alias=True),
    }


@router.get("")
async def list_posts(
    service: PostServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 10,
) -> dict[str, Any]:
    result = await service.list_posts(page, limit)
    return result.model_dump(mode="json", by_alias=True)


@router.get("/{post_id}")
async def get_post(post_id: str, service: PostServiceDep) -> dict[str, Any]:
    try:
        post = await service.get_post(post_id)
    except PostNotFoundError:
        raise NotFoundError("Post", post_id)
    return post.model_dump(mode="json", by_alias=True)


@router.delete("/{post_id}")
async def delete_post(
    post_id: str, user_id: UserIdDep, service: PostServiceDep
) -> dict[str, Any]:
    try:
        await service.delete_post(post_id, user_id)
    except PostNotFoundError:
        raise NotFoundError("Post", post_id)
    return {"success": True, "message": "Post deleted successfully"}
