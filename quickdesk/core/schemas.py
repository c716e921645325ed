"""List envelope shared by the paginated endpoints."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

ItemT = TypeVar("ItemT")


class PageMeta(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    pages: int = Field(..., ge=0, description="Page count for ``total`` at ``limit`` per page")


class PaginatedResponse(BaseModel, Generic[ItemT]):
    success: bool = True
    data: list[ItemT]
    meta: PageMeta


def paginated_response(
    data: list[ItemT], total: int, page: int, limit: int
) -> PaginatedResponse[ItemT]:
    pages = math.ceil(total / limit) if limit else 0
    return PaginatedResponse(
        data=data, meta=PageMeta(total=total, page=page, limit=limit, pages=pages)
    )
