from __future__ import annotations

import math

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Page metadata returned alongside a page of items."""

    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> PaginationMeta:
        return cls(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit))


def page_params(page: int | None, limit: int | None) -> tuple[int, int] | None:
    """Return ``(page, limit)`` when both are positive; otherwise pagination does not apply."""
    if page is None or limit is None or page <= 0 or limit <= 0:
        return None
    return page, limit
