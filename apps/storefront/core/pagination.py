"""Fixed-size paging of an already filtered product list."""

from __future__ import annotations

import math
from typing import Sequence

from ..schemas import ProductPage
from .dataset import Product

DEFAULT_PAGE_SIZE = 8


def page_count(total: int, size: int = DEFAULT_PAGE_SIZE) -> int:
    return math.ceil(total / size) if size > 0 else 0


def paginate(products: Sequence[Product], page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> ProductPage:
    """Slice ``products`` into zero-based page ``page`` of ``size`` items.

    A page past the end comes back with empty content but the real totals.
    """
    if size < 1:
        raise ValueError("page size must be at least 1")
    page = max(page, 0)
    start = page * size
    return ProductPage(
        content=list(products[start : start + size]),
        page=page,
        size=size,
        total_elements=len(products),
        total_pages=page_count(len(products), size),
    )
