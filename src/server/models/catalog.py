# src/server/models/catalog.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from src.server.schemas.catalog import Banner, Product


def utc_now() -> datetime:
    # naive UTC, the way SQLite stores it
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ProductRecord(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(primary_key=True)
    name: str
    brand: str = Field(default="", index=True)
    model_id: Optional[str] = Field(default=None, index=True)
    category_id: Optional[str] = Field(default=None, index=True)
    specs: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    price_retail: int = 0          # centavos
    stock_quantity: int = 0
    status: str = "active"         # "active" | "inactive" | ...
    featured: bool = False
    is_new: bool = False
    has_discount: bool = False
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    def to_product(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            brand=self.brand or "",
            model_id=self.model_id,
            category_id=self.category_id,
            specs=dict(self.specs or {}),
            price_retail=max(int(self.price_retail or 0), 0),
            stock_quantity=int(self.stock_quantity or 0),
            status=self.status,
            featured=bool(self.featured),
            is_new=bool(self.is_new),
            has_discount=bool(self.has_discount),
            image_url=self.image_url,
            created_at=self.created_at,
        )


class CategoryRecord(SQLModel, table=True):
    __tablename__ = "categories"

    id: str = Field(primary_key=True)
    name: str


class CatalogSettingsRecord(SQLModel, table=True):
    """One row per admin user; data is the flat settings record."""
    __tablename__ = "catalog_settings"

    user_id: str = Field(primary_key=True)
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=utc_now)


class BannerRecord(SQLModel, table=True):
    __tablename__ = "catalog_banners"

    id: str = Field(primary_key=True)
    title: str
    image_url: str
    link_url: Optional[str] = None
    link_type: str = "none"
    link_target: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    clicks_count: int = 0
    views_count: int = 0

    def to_banner(self) -> Banner:
        return Banner.model_validate(self.model_dump())


__all_models = [ProductRecord, CategoryRecord, CatalogSettingsRecord, BannerRecord]
