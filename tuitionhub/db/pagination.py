# tuitionhub/db/pagination.py
# Page/limit helper shared by list endpoints

from typing import List, Tuple

from sqlalchemy.orm import Query


def paginate(query: Query, page: int, limit: int) -> Tuple[List, int]:
    """Return (items on `page`, total matching rows). Pages start at 1."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total
