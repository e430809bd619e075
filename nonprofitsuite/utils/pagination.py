"""
Pagination argument parsing for list queries.

Turns a loosely typed options bag (``page``, ``per_page``, ``limit``,
``offset``, ``orderby``, ``order`` plus module filters) into bounded values
and an allow-listed ordering. Column names never reach SQL unless they are in
the caller's allow-list.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy import asc, desc

DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 200

_PAGING_KEYS = {"page", "per_page", "limit", "offset", "orderby", "order"}


def _to_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class PaginationArgs:
    page: int
    per_page: int
    offset: int
    limit: int
    orderby: str
    order: str
    filters: Dict[str, Any] = field(default_factory=dict)

    @property
    def order_by_clause(self) -> str:
        return f"{self.orderby} {self.order}"

    @property
    def limit_clause(self) -> str:
        return build_limit_clause(self)

    def apply(self, query, model):
        """Apply ordering and bounds to a SQLAlchemy query over ``model``."""
        column = getattr(model, self.orderby)
        direction = asc if self.order == "ASC" else desc
        return query.order_by(direction(column)).offset(self.offset).limit(self.limit)

    def cache_args(self) -> Dict[str, Any]:
        """Stable dictionary used when deriving list cache keys."""
        return {
            "filters": self.filters,
            "limit": self.limit,
            "offset": self.offset,
            "orderby": self.orderby,
            "order": self.order,
        }


def parse_pagination_args(
    args: Optional[Mapping[str, Any]],
    allowed_orderby: Iterable[str],
    default_orderby: str = "id",
    default_order: str = "DESC",
    max_per_page: int = MAX_PER_PAGE,
    default_per_page: int = DEFAULT_PER_PAGE,
) -> PaginationArgs:
    args = dict(args or {})
    allowed = set(allowed_orderby)

    page = max(1, _to_int(args.get("page"), 1))
    per_page = min(max(1, _to_int(args.get("per_page"), default_per_page)), max_per_page)
    offset = (page - 1) * per_page
    limit = per_page

    # explicit limit/offset takes precedence over page-based values
    if args.get("limit") is not None and args.get("limit") != "":
        limit = min(max(0, _to_int(args.get("limit"), per_page)), max_per_page)
        offset = max(0, _to_int(args.get("offset"), 0))
        per_page = max(limit, 1)
        page = offset // per_page + 1
    elif args.get("offset") is not None and args.get("offset") != "":
        offset = max(0, _to_int(args.get("offset"), 0))
        page = offset // per_page + 1

    orderby = str(args.get("orderby") or default_orderby)
    if orderby not in allowed:
        orderby = default_orderby

    order = str(args.get("order") or default_order).upper()
    if order not in ("ASC", "DESC"):
        order = default_order.upper()

    filters = {k: v for k, v in args.items() if k not in _PAGING_KEYS and v is not None and v != ""}
    return PaginationArgs(
        page=page,
        per_page=per_page,
        offset=offset,
        limit=limit,
        orderby=orderby,
        order=order,
        filters=filters,
    )


def build_limit_clause(args: PaginationArgs) -> str:
    return "LIMIT %d OFFSET %d" % (args.limit, args.offset)


def get_pagination_meta(total: int, args: PaginationArgs) -> Dict[str, Any]:
    per_page = max(args.per_page, 1)
    total_pages = int(math.ceil(total / per_page)) if total else 0
    return {
        "total": total,
        "per_page": per_page,
        "current_page": args.page,
        "total_pages": total_pages,
        "has_more": args.offset + args.limit < total,
    }
