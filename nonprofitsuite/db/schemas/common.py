from typing import Any, List

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    total: int
    per_page: int
    current_page: int
    total_pages: int
    has_more: bool


class Page(BaseModel):
    items: List[Any]
    pagination: PaginationMeta


class ErrorBody(BaseModel):
    code: str
    message: str
