"""Pagination — page/offset arithmetic.

Tests:
    - Offsets are 1-indexed and clamp non-positive inputs
    - Page totals round up and are zero for empty listings
"""

import pytest

from circle.core.pagination import page_offset, total_pages


@pytest.mark.parametrize(
    "page,limit,expected",
    [(1, 10, 0), (2, 10, 10), (3, 2, 4), (0, 10, 0), (-4, 10, 0), (2, 0, 1)],
)
def test_page_offset(page, limit, expected):
    assert page_offset(page, limit) == expected


@pytest.mark.parametrize(
    "count,limit,expected",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (5, 2, 3), (-1, 10, 0)],
)
def test_total_pages(count, limit, expected):
    assert total_pages(count, limit) == expected
