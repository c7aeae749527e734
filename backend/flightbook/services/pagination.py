import math

from sqlalchemy.orm import Query


def build_pagination(page: int, limit: int, total_items: int) -> dict:
    total_pages = math.ceil(total_items / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total_items": total_items,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }


def paginate(q: Query, page: int, limit: int) -> tuple[list, dict]:
    """Apply offset pagination to an ordered query; returns (rows, pagination)."""
    total = q.count()
    rows = q.offset((page - 1) * limit).limit(limit).all()
    return rows, build_pagination(page, limit, total)
