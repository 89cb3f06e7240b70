from __future__ import annotations

import logging
import os
from typing import List, Optional

import requests
from pydantic import ValidationError

from .dataset import Product, parse_products

CATALOG_API_URL = os.environ.get("CATALOG_API_URL", "http://localhost:8080/api")
CATALOG_FETCH_PAGE_SIZE = int(os.environ.get("CATALOG_FETCH_PAGE_SIZE", "50"))
CATALOG_FETCH_TIMEOUT = float(os.environ.get("CATALOG_FETCH_TIMEOUT", "10"))


class CatalogFetchError(RuntimeError):
    """Raised when the catalog snapshot cannot be retrieved from the backend."""


def _base_url(base_url: Optional[str]) -> str:
    return (base_url or os.environ.get("CATALOG_API_URL") or CATALOG_API_URL).rstrip("/")


def _get_json(url: str, params: Optional[dict] = None, timeout: float = CATALOG_FETCH_TIMEOUT):
    try:
        resp = requests.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as exc:
        logging.exception("catalog request failed: %s params=%s", url, params)
        raise CatalogFetchError(f"Failed to fetch {url}: {exc}") from exc


def fetch_all_products(
    base_url: Optional[str] = None,
    page_size: int = CATALOG_FETCH_PAGE_SIZE,
    timeout: float = CATALOG_FETCH_TIMEOUT,
) -> List[Product]:
    """Walk the paginated ``/products`` listing until every page is retrieved.

    The backend answers with a Spring-style page object: ``content`` holds the
    items and ``totalPages`` the number of pages.
    """
    url = f"{_base_url(base_url)}/products"
    items: List[dict] = []
    page = 0
    total_pages = 1
    while page < total_pages:
        data = _get_json(url, params={"page": page, "size": page_size}, timeout=timeout)
        if not isinstance(data, dict):
            raise CatalogFetchError(f"Unexpected listing payload from {url}")
        items.extend(data.get("content") or [])
        total_pages = int(data.get("totalPages") or 0)
        logging.info("catalog page %d/%d fetched (%d items so far)", page + 1, max(total_pages, 1), len(items))
        page += 1

    try:
        return parse_products(items)
    except ValidationError as exc:
        logging.exception("catalog listing contained an invalid product")
        raise CatalogFetchError("Catalog listing contained an invalid product") from exc


def fetch_categories(base_url: Optional[str] = None, timeout: float = CATALOG_FETCH_TIMEOUT) -> List[str]:
    return list(_get_json(f"{_base_url(base_url)}/products/categories", timeout=timeout) or [])


def fetch_brands(base_url: Optional[str] = None, timeout: float = CATALOG_FETCH_TIMEOUT) -> List[str]:
    return list(_get_json(f"{_base_url(base_url)}/products/brands", timeout=timeout) or [])
