"""Download the full product catalog from the storefront backend.

Walks every page of the ``/products`` listing and writes the snapshot to a JSON
file that the API can serve locally (see ``CATALOG_PATH``).
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from storefront.core.catalog_client import CATALOG_FETCH_PAGE_SIZE, fetch_all_products

DEFAULT_OUTPUT = Path(__file__).resolve().parents[1] / "data" / "sample_products.json"


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch the catalog snapshot from the backend")
    parser.add_argument("--base-url", help="Backend API base URL (defaults to CATALOG_API_URL)")
    parser.add_argument("--page-size", type=int, default=CATALOG_FETCH_PAGE_SIZE)
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Where to write the JSON snapshot")
    args = parser.parse_args()

    products = fetch_all_products(base_url=args.base_url, page_size=args.page_size)
    payload = [p.model_dump(mode="json", by_alias=True) for p in products]
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps(payload, indent=2))
    print(f"Saved {len(products)} products to {args.output}")


if __name__ == "__main__":
    main()
