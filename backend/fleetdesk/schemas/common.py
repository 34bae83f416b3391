"""Common schemas used across the application."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper.

    Usage:
        response_model=PaginatedResponse[VoyageOut]

    Returns:
        {
            "data": [...],
            "pagination": {"total": 150, "page": 2, "limit": 20, "total_pages": 8}
        }

    `total` counts only rows visible to the caller.
    """
    data: list[T]
    pagination: Pagination

    @classmethod
    def build(cls, data: list, total: int, page: int, limit: int) -> "PaginatedResponse":
        return cls(
            data=data,
            pagination=Pagination(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit) if limit else 0,
            ),
        )


class MessageResponse(BaseModel):
    message: str
