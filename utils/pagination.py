import math
from typing import Any, List

from fastapi import Query

from utils.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT


class PaginationParams:
    """
    Query parameters shared by every paginated listing: page (1-based) and limit.
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number, starting at 1"),
        limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT, description="Items per page"),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginate(query, params: PaginationParams):
    """
    Applies offset/limit to a SQLAlchemy query.

    Returns:
        tuple: (rows of the requested page, total number of rows)
    """
    total = query.order_by(None).count()
    rows = query.offset(params.offset).limit(params.limit).all()
    return rows, total


def build_page(items: List[Any], total: int, params: PaginationParams) -> dict:
    return {
        "items": items,
        "total": total,
        "page": params.page,
        "limit": params.limit,
        "totalPages": math.ceil(total / params.limit) if total else 0,
    }
