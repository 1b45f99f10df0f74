"""Search endpoint: GET /api/search?query=..."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Query

from murmur.api.deps import SearchServiceDep
from murmur.api.errors import BadRequestError

router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("")
async def search_posts(
    service: SearchServiceDep,
    query: Annotated[str, Query(max_length=500)] = "",
) -> list[dict[str, Any]]:
    if not query.strip():
        raise BadRequestError("Query must not be empty")
    hits = await service.search(query)
    return [hit.model_dump(mode="json", by_alias=True) for hit in hits]
