"""Offset pagination shared by the user and card list endpoints.

Pages are zero-based. `total_pages` is 0 for an empty result set.
"""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if not 1 <= self.size <= MAX_PAGE_SIZE:
            raise ValueError(f"size must be between 1 and {MAX_PAGE_SIZE}")

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(BaseModel, Generic[T]):
    items: list[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def build(cls, items: list[T], request: PageRequest, total: int) -> "Page[T]":
        return cls(
            items=items,
            page=request.page,
            size=request.size,
            total_elements=total,
            total_pages=math.ceil(total / request.size) if total else 0,
        )


def page_params(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
) -> PageRequest:
    """FastAPI dependency turning page/size query params into a PageRequest."""
    return PageRequest(page=page, size=size)

