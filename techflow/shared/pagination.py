"""Pagination, sorting and free-text search helpers shared by list endpoints"""

import math
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Query

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class Pagination:
    page: int
    limit: int
    offset: int
    sort_by: str
    sort_order: str  # ASC or DESC


def parse_pagination(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    default_sort: str = "created_at",
    valid_sort_fields: Optional[list[str]] = None,
) -> Pagination:
    """Normalize list query parameters, rejecting unknown sort fields with 400"""
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)
    sort_by = sort_by or default_sort
    order = "DESC" if sort_order and sort_order.upper() == "DESC" else "ASC"

    if valid_sort_fields is not None and sort_by not in valid_sort_fields:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid sortBy field '{sort_by}'. Valid fields: {', '.join(valid_sort_fields)}",
        )

    return Pagination(
        page=page,
        limit=limit,
        offset=(page - 1) * limit,
        sort_by=sort_by,
        sort_order=order,
    )


def paginate(query: Query, pagination: Pagination, column_map: dict) -> tuple[list, int]:
    """Apply ordering, offset and limit. Returns (rows, total)"""
    total = query.order_by(None).count()
    column = column_map[pagination.sort_by]
    ordering = column.desc() if pagination.sort_order == "DESC" else column.asc()
    rows = query.order_by(ordering).offset(pagination.offset).limit(pagination.limit).all()
    return rows, total


def pagination_meta(total: int, pagination: Pagination) -> dict:
    return {
        "total": total,
        "page": pagination.page,
        "limit": pagination.limit,
        "total_pages": math.ceil(total / pagination.limit) if pagination.limit else 0,
    }


def build_search_condition(term: Optional[str], columns: list):
    """OR of case-insensitive LIKE matches, or None when there is no search term"""
    if not term or not term.strip():
        return None
    pattern = f"%{term.strip()}%"
    return or_(*[column.ilike(pattern) for column in columns])
