"""Catalog browsing endpoints backed by the in-memory query engine.

Each request takes the current snapshot, runs the filter pipeline from
scratch and pages the result. The snapshot itself is loaded once and cached
until an admin refresh.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from ..core.dataset import Product, catalog_brands, catalog_categories, find_product, load_catalog
from ..core.filter_algorithms import apply_filters
from ..core.pagination import DEFAULT_PAGE_SIZE, paginate
from ..schemas import DEFAULT_SORT, FilterCriteria, SearchRequest, SearchResponse

router = APIRouter()


def _run_query(criteria: FilterCriteria, page: int, size: int) -> SearchResponse:
    products = load_catalog()
    filtered = apply_filters(products, criteria)
    result = paginate(filtered, page=page, size=size)
    return SearchResponse(
        results=result,
        debug={
            "catalog_size": len(products),
            "matched": len(filtered),
            "query": criteria.to_query_params(page),
        },
    )


@router.get("/products", response_model=SearchResponse)
def list_products(
    search_term: Optional[str] = Query(default=None, alias="searchTerm"),
    category: Optional[str] = None,
    brand: Optional[str] = None,
    color: Optional[str] = None,
    size: Optional[str] = None,
    # kept as strings so malformed numbers act as open bounds instead of a 422
    min_price: Optional[str] = Query(default=None, alias="minPrice"),
    max_price: Optional[str] = Query(default=None, alias="maxPrice"),
    sort_by: str = Query(default=DEFAULT_SORT, alias="sortBy"),
    available: Optional[str] = None,
    min_discount: Optional[str] = Query(default=None, alias="minDiscount"),
    seller_id: Optional[str] = Query(default=None, alias="sellerId"),
    page: int = Query(default=0, ge=0),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
) -> SearchResponse:
    criteria = FilterCriteria(
        search_term=search_term,
        category=category,
        brand=brand,
        color=color,
        size=size,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        available=available,
        min_discount=min_discount,
        seller_id=seller_id,
    )
    return _run_query(criteria, page, page_size)


@router.get("/products/seller/{seller_id}", response_model=SearchResponse)
def list_seller_products(
    seller_id: str,
    sort_by: str = Query(default=DEFAULT_SORT, alias="sortBy"),
    page: int = Query(default=0, ge=0),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
) -> SearchResponse:
    """One seller's storefront: the same pipeline narrowed to ``seller_id``."""
    return _run_query(FilterCriteria(seller_id=seller_id, sort_by=sort_by), page, page_size)


@router.post("/search", response_model=SearchResponse)
def search_catalog(request: SearchRequest) -> SearchResponse:
    return _run_query(request.filters, request.page, request.size)


@router.get("/products/{product_id}", response_model=Product)
def get_product(product_id: str) -> Product:
    product = find_product(load_catalog(), product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product


@router.get("/categories", response_model=List[str])
def list_categories() -> List[str]:
    return catalog_categories(load_catalog())


@router.get("/brands", response_model=List[str])
def list_brands() -> List[str]:
    return catalog_brands(load_catalog())
