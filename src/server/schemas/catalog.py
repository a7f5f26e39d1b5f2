# src/server/schemas/catalog.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class Product(BaseModel):
    """
    A catalog product as it comes out of the data store.

    price_retail is always an integer number of centavos.
    specs is an open mapping, e.g.
      {"ram": "8GB", "storage": "256GB", "color": "Preto", "color_hex": "#000000"}
    """
    id: str
    name: str
    brand: str = ""
    model_id: Optional[str] = None
    category_id: Optional[str] = None
    specs: Dict[str, Any] = Field(default_factory=dict)
    price_retail: int = Field(default=0, ge=0)
    stock_quantity: int = 0
    status: str = "active"
    featured: bool = False
    is_new: bool = False
    has_discount: bool = False
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def group_key(self) -> str:
        return self.model_id or self.id

    def spec(self, name: str) -> Optional[str]:
        value = self.specs.get(name)
        if value is None or value == "":
            return None
        return str(value)


class ColorOption(BaseModel):
    name: str
    hex: Optional[str] = None


class PriceRange(BaseModel):
    min: int = 0
    max: int = 0


class ProductVariants(BaseModel):
    rams: List[str] = Field(default_factory=list)
    storages: List[str] = Field(default_factory=list)
    colors: List[ColorOption] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=PriceRange)


class VariantSpecs(BaseModel):
    """None means "don't care" for that field."""
    ram: Optional[str] = None
    storage: Optional[str] = None
    color: Optional[str] = None


class CategorySummary(BaseModel):
    id: str
    name: str
    count: int = 0


class BrandSummary(BaseModel):
    name: str
    count: int = 0


class CatalogFilters(BaseModel):
    """UI filter state. price_range is in centavos, inclusive on both ends."""
    search: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    price_range: Optional[Tuple[int, int]] = None
    in_stock_only: bool = False
    featured_only: bool = False
    new_only: bool = False


class ProductPage(BaseModel):
    """One page as reported by the data store."""
    rows: List[Product] = Field(default_factory=list)
    has_more: bool = False


class CatalogPage(BaseModel):
    products: List[Product] = Field(default_factory=list)
    has_more: bool = False
    page: int = 1


class Banner(BaseModel):
    id: str
    title: str
    image_url: str
    link_url: Optional[str] = None
    link_type: str = "none"          # "product" | "category" | "external" | "none"
    link_target: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    clicks_count: int = 0
    views_count: int = 0


class Address(BaseModel):
    cep: str
    street: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    number: Optional[str] = None
    complement: Optional[str] = None
