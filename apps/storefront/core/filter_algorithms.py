"""In-memory query engine over a catalog snapshot.

Every query rebuilds its helper structures (price-ordered list, attribute
buckets, prefix trie) from the candidate set it is given and discards them
afterwards. Nothing here keeps module-level state, so the functions can be
called repeatedly or from several requests at once on independent snapshots.

Pipeline order used by :func:`apply_filters`:

    price range -> brand -> category -> color -> size -> availability
    -> minimum discount -> seller -> prefix search -> sort
"""

from __future__ import annotations

import logging
import math
import unicodedata
from bisect import bisect_left, bisect_right
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .dataset import Product

T = TypeVar("T")

Comparator = Callable[[T, T], float]

ATTRIBUTES = ("brand", "category", "color", "size")
SEARCH_FIELDS = ("name", "description", "brand", "category")


def quick_sort(items: Sequence[T], compare: Comparator) -> List[T]:
    """Sort ``items`` with a three-way ``compare`` and return a new list.

    Uses the last element as pivot; items comparing below the pivot go left,
    everything else goes right. Equal items are not kept in input order, and
    already-ordered input costs O(n^2) comparisons. The recursion is unrolled
    onto a work stack so deep partitions do not exhaust the interpreter stack.
    """
    result: List[T] = []
    # entries are ("sort", segment) or ("emit", pivot); popped last-in first-out
    stack: list = [("sort", list(items))]
    while stack:
        kind, value = stack.pop()
        if kind == "emit":
            result.append(value)
            continue
        if len(value) <= 1:
            result.extend(value)
            continue
        pivot = value[-1]
        left: List[T] = []
        right: List[T] = []
        for item in value[:-1]:
            if compare(item, pivot) < 0:
                left.append(item)
            else:
                right.append(item)
        stack.append(("sort", right))
        stack.append(("emit", pivot))
        stack.append(("sort", left))
    return result


def normalize_price_bound(value, default: float) -> float:
    """Turn a missing or unusable price bound into ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


def binary_search_price_range(
    products: Iterable[Product],
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
) -> List[Product]:
    """Return products with ``min_price <= price <= max_price``, ordered by price."""
    low = normalize_price_bound(min_price, 0.0)
    high = normalize_price_bound(max_price, math.inf)

    by_price = sorted(products, key=lambda p: p.price)
    prices = [p.price for p in by_price]

    lower = bisect_left(prices, low)
    upper = bisect_right(prices, high) - 1
    if lower >= len(prices) or upper < 0 or lower > upper:
        return []
    return by_price[lower : upper + 1]


def build_attribute_index(products: Iterable[Product], attribute: str) -> Dict[str, List[Product]]:
    if attribute not in ATTRIBUTES:
        raise ValueError(f"Unsupported attribute: {attribute!r}")
    index: Dict[str, List[Product]] = defaultdict(list)
    for product in products:
        raw = getattr(product, attribute, None)
        if raw is None:
            continue
        index[str(raw).lower()].append(product)
    return index


def filter_by_attribute(products: Iterable[Product], attribute: str, value: str) -> List[Product]:
    """Exact, case-insensitive match of ``attribute`` against ``value``."""
    index = build_attribute_index(products, attribute)
    return list(index.get(str(value).lower(), []))


class TrieNode:
    __slots__ = ("children", "products")

    def __init__(self) -> None:
        self.children: Dict[str, TrieNode] = {}
        # keyed by object identity so distinct products never collapse
        self.products: Dict[int, Product] = {}


class ProductTrie:
    """Prefix trie over the lower-cased searchable fields of each product.

    Each field value is inserted as a whole, so a prefix matches from the
    start of the name, description, brand or category.
    """

    def __init__(self) -> None:
        self.root = TrieNode()
        self._inserted: Dict[int, Product] = {}

    def __len__(self) -> int:
        return len(self._inserted)

    def insert(self, product: Product) -> None:
        self._inserted.setdefault(id(product), product)
        for field_name in SEARCH_FIELDS:
            text = getattr(product, field_name, None)
            if not text:
                continue
            node = self.root
            for char in text.lower():
                node = node.children.setdefault(char, TrieNode())
                node.products.setdefault(id(product), product)

    def search(self, prefix: str) -> List[Product]:
        # An empty prefix matches everything that was inserted.
        if not prefix:
            return list(self._inserted.values())
        node = self.root
        for char in prefix.lower():
            node = node.children.get(char)
            if node is None:
                return []
        return list(node.products.values())


def create_product_trie(products: Iterable[Product]) -> ProductTrie:
    trie = ProductTrie()
    for product in products:
        trie.insert(product)
    return trie


def _created_key(product: Product) -> datetime:
    created = product.created_at
    if created is None:
        return datetime.min
    if created.tzinfo is not None:
        return created.astimezone(timezone.utc).replace(tzinfo=None)
    return created


def _name_key(product: Product) -> tuple:
    """Collation key close to a root-locale ``localeCompare``.

    Base letters decide first, then accents, then case with lowercase first.
    """
    decomposed = unicodedata.normalize("NFKD", product.name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (
        base.casefold(),
        decomposed.casefold(),
        tuple(ch.isupper() for ch in decomposed),
    )


def _three_way(a, b) -> int:
    return (a > b) - (a < b)


_FIELD_COMPARATORS: Dict[str, Comparator] = {
    "price": lambda a, b: a.price - b.price,
    "name": lambda a, b: _three_way(_name_key(a), _name_key(b)),
    "createdAt": lambda a, b: _three_way(_created_key(a), _created_key(b)),
}
_FIELD_COMPARATORS["created_at"] = _FIELD_COMPARATORS["createdAt"]


def parse_sort_key(sort_by: str) -> tuple[str, str]:
    """Split ``"price_desc"`` into ``("price", "desc")``; direction defaults to asc."""
    field_name, sep, direction = sort_by.rpartition("_")
    if not sep or direction not in ("asc", "desc", ""):
        return sort_by, "asc"
    return field_name, direction or "asc"


def product_comparator(sort_by: Optional[str]) -> Optional[Comparator]:
    """Build a comparator for ``sort_by`` or ``None`` when the field is unknown."""
    if not sort_by:
        return None
    field_name, direction = parse_sort_key(sort_by)
    compare = _FIELD_COMPARATORS.get(field_name)
    if compare is None:
        return None
    if direction == "desc":
        return lambda a, b: -compare(a, b)
    return compare


def sort_products(products: Sequence[Product], sort_by: Optional[str]) -> List[Product]:
    compare = product_comparator(sort_by)
    if compare is None:
        return list(products)
    return quick_sort(products, compare)


def apply_filters(products: Iterable[Product], criteria) -> List[Product]:
    """Run the full query pipeline and return the products to display.

    ``criteria`` is a :class:`~storefront.schemas.FilterCriteria` (or anything
    with the same attributes). Stages whose criterion is unset are skipped.
    """
    filtered = list(products)
    logging.debug("apply_filters: %d candidates", len(filtered))

    min_price = normalize_price_bound(criteria.min_price, None)
    max_price = normalize_price_bound(criteria.max_price, None)
    if min_price is not None or max_price is not None:
        filtered = binary_search_price_range(filtered, min_price, max_price)
        logging.debug("price range [%s, %s]: %d left", min_price, max_price, len(filtered))

    for attribute in ATTRIBUTES:
        value = getattr(criteria, attribute)
        if value:
            filtered = filter_by_attribute(filtered, attribute, value)
            logging.debug("%s=%r: %d left", attribute, value, len(filtered))

    if criteria.available is not None:
        filtered = [p for p in filtered if p.available == criteria.available]
        logging.debug("available=%s: %d left", criteria.available, len(filtered))

    if criteria.min_discount is not None:
        filtered = [p for p in filtered if (p.discount_percentage or 0) >= criteria.min_discount]
        logging.debug("min_discount=%s: %d left", criteria.min_discount, len(filtered))

    if criteria.seller_id is not None:
        filtered = [p for p in filtered if p.seller_id is not None and str(p.seller_id) == str(criteria.seller_id)]
        logging.debug("seller_id=%s: %d left", criteria.seller_id, len(filtered))

    if criteria.search_term:
        trie = create_product_trie(filtered)
        filtered = trie.search(criteria.search_term)
        logging.debug("search %r: %d left", criteria.search_term, len(filtered))

    if criteria.sort_by:
        filtered = sort_products(filtered, criteria.sort_by)

    return filtered
