import pytest

from scripts.query_catalog import build_parser, criteria_from_args
from storefront.core.dataset import Product
from storefront.core.pagination import paginate
from storefront.schemas import FilterCriteria


def test_criteria_from_address_bar():
    criteria = FilterCriteria.from_query_params(
        {
            "searchTerm": "blue",
            "category": "apparel",
            "minPrice": "10",
            "maxPrice": "",
            "available": "false",
            "sortBy": "price_asc",
            "page": "2",
        }
    )
    assert criteria.search_term == "blue"
    assert criteria.category == "apparel"
    assert criteria.min_price == 10.0
    assert criteria.max_price is None
    assert criteria.available is False
    assert criteria.sort_by == "price_asc"


@pytest.mark.parametrize("raw", ["abc", "nan", "NaN", "inf", "", "   "])
def test_invalid_price_bounds_become_open(raw):
    criteria = FilterCriteria(min_price=raw, max_price=raw)
    assert criteria.min_price is None
    assert criteria.max_price is None


def test_blank_text_criteria_are_unset():
    criteria = FilterCriteria(brand="  ", search_term="")
    assert criteria.brand is None
    assert criteria.search_term is None


def test_criteria_round_trip_to_address_bar():
    criteria = FilterCriteria(brand="nike", min_price=10, max_price=59.5, available=True, sort_by="price_desc")
    assert criteria.to_query_params(page=3) == {
        "brand": "nike",
        "minPrice": "10",
        "maxPrice": "59.5",
        "sortBy": "price_desc",
        "available": "true",
        "page": "3",
    }
    assert "page" not in criteria.to_query_params()
    assert FilterCriteria.from_query_params(criteria.to_query_params()) == criteria


def _products(count):
    return [Product(id=i, name=f"Item {i}", price=i) for i in range(count)]


def test_paginate_slices_fixed_size_pages():
    products = _products(19)
    first = paginate(products, page=0, size=8)
    last = paginate(products, page=2, size=8)
    assert [p.id for p in first.content] == list(range(8))
    assert [p.id for p in last.content] == [16, 17, 18]
    assert first.total_pages == 3
    assert first.total_elements == 19


def test_paginate_past_the_end_is_empty():
    page = paginate(_products(3), page=5, size=8)
    assert page.content == []
    assert page.total_pages == 1


def test_paginate_rejects_zero_size():
    with pytest.raises(ValueError):
        paginate(_products(3), size=0)


def test_discount_and_seller_round_trip_to_address_bar():
    criteria = FilterCriteria.from_query_params({"minDiscount": "15", "sellerId": "4", "sortBy": "name_asc"})
    assert criteria.min_discount == 15.0
    assert criteria.seller_id == "4"
    assert criteria.to_query_params() == {"minDiscount": "15", "sellerId": "4", "sortBy": "name_asc"}


@pytest.mark.parametrize("raw", ["abc", "nan", ""])
def test_invalid_min_discount_is_unset(raw):
    assert FilterCriteria(min_discount=raw).min_discount is None


def test_command_line_options_map_to_criteria(tmp_path):
    args = build_parser().parse_args(
        [
            "--catalog", str(tmp_path / "catalog.json"),
            "--search", "blue",
            "--brand", "nike",
            "--min-price", "10",
            "--max-price", "oops",
            "--min-discount", "5",
            "--seller", "2",
            "--sort", "price_desc",
            "--available", "true",
            "--page", "1",
            "--page-size", "4",
        ]
    )
    criteria = criteria_from_args(args)
    assert criteria == FilterCriteria(
        search_term="blue",
        brand="nike",
        min_price=10,
        min_discount=5,
        seller_id="2",
        sort_by="price_desc",
        available=True,
    )


def test_command_line_defaults_only_sort():
    criteria = criteria_from_args(build_parser().parse_args([]))
    assert criteria.to_query_params() == {"sortBy": "createdAt_desc"}
