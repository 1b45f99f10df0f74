"""Shared FastAPI dependencies for murmur routers.

Services are taken from the Runtime stored on the application state, so
tests can inject a runtime built from fakes.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from murmur.api.errors import ApiError, UnauthorizedError
from murmur.runtime import Runtime
from murmur.services.posts import PostService
from murmur.services.search import SearchService


def get_runtime(request: Request) -> Runtime:
    runtime: Runtime | None = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise ApiError(503, "Service is starting")
    return runtime


def get_post_service(runtime: Annotated[Runtime, Depends(get_runtime)]) -> PostService:
    if runtime.post_service is None:
        raise ApiError(503, "Post service is not enabled on this instance")
    return runtime.post_service


def get_search_service(runtime: Annotated[Runtime, Depends(get_runtime)]) -> SearchService:
    if runtime.search_service is None:
        raise ApiError(503, "Search service is not enabled on this instance")
    return runtime.search_service


def current_user_id(
    x_user_id: Annotated[str | None, Header(description="Caller identity set by the gateway")] = None,
) -> str:
    """FastAPI dependency returning the caller identity forwarded by the gateway.

    Raises:
        UnauthorizedError: If the x-user-id header is missing
    """
    if not x_user_id:
        raise UnauthorizedError("Authentication required. Please login to continue")
    return x_user_id


RuntimeDep = Annotated[Runtime, Depends(get_runtime)]
PostServiceDep = Annotated[PostService, Depends(get_post_service)]
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
UserIdDep = Annotated[str, Depends(current_user_id)]
