"""Response envelopes shared by the v1 routers.

Entities go out as ``{data: ...}``; lists add a ``meta`` object; writes that
return nothing answer ``{message: ...}``.
"""


from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from app.core.pagination import PaginationParams

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class MessageResponse(BaseModel):
    message: str


def paginated(items: list, total: int, pagination: PaginationParams) -> dict:
    """Page of *items* with ``meta {total, page, limit, pages}``."""
    return {"data": items, "meta": pagination.meta(total).model_dump()}


def with_meta(items: list, **meta: Any) -> dict:
    """Unpaginated list; ``meta.total`` is the item count plus any extra keys."""
    return {"data": items, "meta": {"total": len(items), **meta}}
