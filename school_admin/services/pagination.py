from typing import Optional, Tuple

from sqlalchemy.orm import Query

from school_admin.core.config import settings
from school_admin.core.errors import InvalidRequest


def normalize_paging(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    page = 1 if page is None else page
    limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
    if page < 1 or limit < 1:
        raise InvalidRequest("page and limit must be positive integers")
    return page, min(limit, settings.MAX_PAGE_SIZE)


def paginate(query: Query, page: Optional[int], limit: Optional[int]):
    """Run ``query`` for one page. Returns (items, total, page, limit)."""
    page, limit = normalize_paging(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total, page, limit
