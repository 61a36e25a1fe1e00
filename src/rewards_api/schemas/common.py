from __future__ import annotations

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field


DataT = TypeVar("DataT")
ItemT = TypeVar("ItemT")

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT


class ApiErrorDetail(BaseModel):
    code: str
    message: str


class ApiErrorResponse(BaseModel):
    success: bool = False
    error: ApiErrorDetail


class Page(BaseModel, Generic[ItemT]):
    items: list[ItemT] = Field(default_factory=list)
    page: int
    per_page: int
    total: int
    total_pages: int


class PageParams(BaseModel):
    """Pagination query values after clamping (page >= 1, per_page in 1..100)."""

    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    @classmethod
    def from_query(cls, page: int | None, per_page: int | None) -> "PageParams":
        resolved_page = DEFAULT_PAGE if page is None else max(page, 1)
        resolved_per_page = DEFAULT_PER_PAGE if per_page is None else min(max(per_page, 1), MAX_PER_PAGE)
        return cls(page=resolved_page, per_page=resolved_per_page)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.per_page) if total else 0
