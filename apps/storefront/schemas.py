"""Pydantic schemas for catalog queries and the API surface."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .core.dataset import Product

DEFAULT_SORT = "createdAt_desc"


class FilterCriteria(BaseModel):
    # Field aliases match the query-string names used by the storefront UI.
    model_config = ConfigDict(populate_by_name=True)

    search_term: Optional[str] = Field(default=None, alias="searchTerm")
    category: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    min_price: Optional[float] = Field(default=None, alias="minPrice")
    max_price: Optional[float] = Field(default=None, alias="maxPrice")
    sort_by: Optional[str] = Field(default=None, alias="sortBy")
    available: Optional[bool] = None
    min_discount: Optional[float] = Field(default=None, alias="minDiscount")
    seller_id: Optional[str] = Field(default=None, alias="sellerId")

    @field_validator("seller_id", mode="before")
    @classmethod
    def _seller_key(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, bool):
            return None
        value = str(value).strip()
        return value or None

    @field_validator("search_term", "category", "brand", "color", "size", "sort_by", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("min_price", "max_price", "min_discount", mode="before")
    @classmethod
    def _open_bound(cls, value: Any) -> Optional[float]:
        """Blank, non-numeric, NaN or infinite bounds mean "no bound"."""
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return number

    @field_validator("available", mode="before")
    @classmethod
    def _parse_available(cls, value: Any) -> Optional[bool]:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "1", "yes"):
                return True
            if lowered in ("false", "0", "no"):
                return False
            return None
        return value

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "FilterCriteria":
        """Build criteria from address-bar parameters (``searchTerm``, ``minPrice`` ...)."""
        known = {
            field.alias or name: params[field.alias or name]
            for name, field in cls.model_fields.items()
            if (field.alias or name) in params
        }
        return cls.model_validate(known)

    def to_query_params(self, page: int = 0) -> Dict[str, str]:
        """Reflect the active criteria back into address-bar parameters."""
        params: Dict[str, str] = {}
        for key, value in self.model_dump(by_alias=True, exclude_none=True).items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            elif isinstance(value, float) and value.is_integer():
                params[key] = str(int(value))
            else:
                params[key] = str(value)
        if page > 0:
            params["page"] = str(page)
        return params


class ProductPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: List[Product] = Field(default_factory=list)
    page: int = 0
    size: int = 8
    total_elements: int = Field(default=0, alias="totalElements")
    total_pages: int = Field(default=0, alias="totalPages")


class SearchRequest(BaseModel):
    filters: FilterCriteria = Field(default_factory=FilterCriteria)
    page: int = Field(default=0, ge=0)
    size: int = Field(default=8, ge=1, le=100)


class SearchResponse(BaseModel):
    results: ProductPage
    debug: dict = Field(default_factory=dict)
