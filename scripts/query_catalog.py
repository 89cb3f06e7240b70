"""Run one catalog query from the command line and print the matching products."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from storefront.core.dataset import CATALOG_PATH, parse_products
from storefront.core.filter_algorithms import apply_filters
from storefront.core.pagination import DEFAULT_PAGE_SIZE, paginate
from storefront.schemas import DEFAULT_SORT, FilterCriteria

# options that control the run rather than the filter criteria
_RUN_OPTIONS = ("catalog", "page", "page_size")


def build_parser() -> argparse.ArgumentParser:
    # dest names are the address-bar parameter names understood by FilterCriteria
    parser = argparse.ArgumentParser(description="Filter, search and sort a catalog snapshot")
    parser.add_argument("--catalog", type=Path, default=CATALOG_PATH, help="Path to catalog JSON")
    parser.add_argument("--search", dest="searchTerm")
    parser.add_argument("--category")
    parser.add_argument("--brand")
    parser.add_argument("--color")
    parser.add_argument("--size")
    parser.add_argument("--min-price", dest="minPrice")
    parser.add_argument("--max-price", dest="maxPrice")
    parser.add_argument("--min-discount", dest="minDiscount")
    parser.add_argument("--seller", dest="sellerId")
    parser.add_argument("--sort", dest="sortBy", default=DEFAULT_SORT)
    parser.add_argument("--available", choices=["true", "false"])
    parser.add_argument("--page", type=int, default=0)
    parser.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)
    return parser


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    params = {k: v for k, v in vars(args).items() if v is not None and k not in _RUN_OPTIONS}
    return FilterCriteria.from_query_params(params)


def main() -> None:
    args = build_parser().parse_args()

    if not args.catalog.exists():
        raise SystemExit(f"Missing catalog file {args.catalog}. Run fetch_catalog.py first.")

    products = parse_products(json.loads(args.catalog.read_text()))
    filtered = apply_filters(products, criteria_from_args(args))
    result = paginate(filtered, page=args.page, size=args.page_size)
    print(f"{result.total_elements} matches, page {result.page + 1}/{max(result.total_pages, 1)}")
    for product in result.content:
        print(f"  [{product.id}] {product.name} ({product.brand}, {product.category}) {product.price:.2f}")


if __name__ == "__main__":
    main()
