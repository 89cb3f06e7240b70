"""Product model and helpers for loading the catalog snapshot into memory."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

_POSSIBLE_PATHS = [
    Path(__file__).resolve().parents[3] / "data" / "sample_products.json",
    Path(__file__).resolve().parents[2] / "data" / "sample_products.json",
]


def _find_catalog_path() -> Path:
    override = os.environ.get("CATALOG_PATH")
    if override:
        return Path(override)
    for p in _POSSIBLE_PATHS:
        if p.exists():
            return p
    # fall back to the first path which will raise a readable error on access
    return _POSSIBLE_PATHS[0]


CATALOG_PATH = _find_catalog_path()


class Product(BaseModel):
    """Read-only product snapshot as served by the storefront backend."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int | str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    price: float = Field(ge=0)
    discount_percentage: Optional[float] = Field(
        default=None, ge=0, le=100, alias="discountPercentage"
    )
    stock: int = Field(default=0, ge=0)
    available: bool = True
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    seller_id: Optional[int] = Field(default=None, alias="sellerId")
    seller_username: Optional[str] = Field(default=None, alias="sellerUsername")


def parse_products(items: Iterable[dict]) -> List[Product]:
    return [Product.model_validate(item) for item in items]


@lru_cache(maxsize=1)
def load_catalog() -> List[Product]:
    """Return the current catalog snapshot.

    The snapshot comes from the storefront backend when ``CATALOG_API_URL`` is
    set, otherwise from the bundled JSON file. The result is cached until
    :func:`refresh_catalog` is called.
    """
    if os.environ.get("CATALOG_API_URL"):
        from .catalog_client import fetch_all_products

        return fetch_all_products()

    data = json.loads(CATALOG_PATH.read_text())
    products = parse_products(data)
    logging.info("Loaded %d products from %s", len(products), CATALOG_PATH)
    return products


def refresh_catalog() -> None:
    """Drop the cached snapshot so the next query loads a fresh one."""
    load_catalog.cache_clear()
    logging.info("Catalog snapshot cache cleared")


def find_product(products: Iterable[Product], product_id: str) -> Optional[Product]:
    for product in products:
        if str(product.id) == str(product_id):
            return product
    return None


def _distinct(values: Iterable[Optional[str]]) -> List[str]:
    seen = {}
    for value in values:
        if value and value.lower() not in seen:
            seen[value.lower()] = value
    return sorted(seen.values(), key=str.lower)


def catalog_categories(products: Iterable[Product]) -> List[str]:
    return _distinct(p.category for p in products)


def catalog_brands(products: Iterable[Product]) -> List[str]:
    return _distinct(p.brand for p in products)
