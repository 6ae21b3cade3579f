"""``page`` / ``limit`` query handling for list endpoints.

Values are parsed leniently: anything missing, non-numeric or below 1 falls
back to the default instead of failing validation.
"""


import math

from fastapi import Query
from pydantic import BaseModel

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def _positive(raw: int | str | None, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class PaginationParams:
    """FastAPI dependency for ``?page=1&limit=10``."""

    def __init__(
        self,
        page: str | None = Query(default=None, description="Page number (1-based)"),
        limit: str | None = Query(default=None, description="Items per page"),
    ):
        self.page = _positive(page, DEFAULT_PAGE)
        self.limit = _positive(limit, DEFAULT_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PageMeta:
        return PageMeta(
            total=total,
            page=self.page,
            limit=self.limit,
            pages=math.ceil(total / self.limit),
        )
