import math
from typing import TypeVar

from pydantic import Field

from taskvault.core.db import ApiModel

T = TypeVar("T")


class Pagination(ApiModel):
    """Page metadata for list endpoints."""

    page: int = Field(..., description="Current page, starting at 1", ge=1)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    total: int = Field(..., description="Total number of items across all pages", ge=0)
    total_pages: int = Field(..., description="Number of pages for the given limit", ge=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationResult[T](ApiModel):
    """Pagination result wrapper for list endpoints."""

    items: list[T] = Field(..., description="List of items in current page")
    pagination: Pagination
