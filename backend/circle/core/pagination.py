"""Pagination — pure page/offset arithmetic shared by every paginated listing.

Invariants:
    - page is 1-indexed; offset = (page - 1) * limit
    - total pages = ceil(count / limit); zero items means zero pages
    - Never raises for page/limit below 1: they are clamped to 1

Design Decisions:
    - Pure functions in core/ (no IO): stores call them, tests cover them directly
"""

import math


def page_offset(page: int, limit: int) -> int:
    """Row offset for a 1-indexed page."""
    return (max(page, 1) - 1) * max(limit, 1)


def total_pages(count: int, limit: int) -> int:
    """Number of pages needed to show count items, limit per page."""
    if count <= 0:
        return 0
    return math.ceil(count / max(limit, 1))
