from __future__ import annotations

import math


def pagination_block(page: int, limit: int, total: int, total_key: str = "total") -> dict:
    """Pagination metadata in the shape the web client reads."""
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        total_key: total,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
        "limit": limit,
    }
