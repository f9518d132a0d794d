# gaadiyaan/presenter.py
import math
from typing import Any, Dict, List

from .schemas import ListingPage, Pagination


def present(rows: List[Dict[str, Any]], total: int, page: int, page_size: int) -> ListingPage:
    """Wrap an already decoded page of listings with pagination metadata."""
    total_pages = math.ceil(total / page_size) if page_size else 0
    return ListingPage(
        success=True,
        data=rows,
        pagination=Pagination(
            total=total,
            total_pages=total_pages,
            current_page=page,
            has_more=page < total_pages,
            limit=page_size,
        ),
    )
