from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of results plus the total count across all pages."""

    items: list[T]
    total: int
    page: int
    page_size: int
