# tests/conftest.py
import asyncio
import os, sys
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest

# put the project root (the folder holding "src") first on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from src.server.schemas.catalog import (  # noqa: E402
    Banner,
    CatalogFilters,
    CategorySummary,
    Product,
    ProductPage,
)
from src.server.schemas.quote import (  # noqa: E402
    CartVariant,
    InstallmentPlan,
    PaymentOptions,
    QuoteCartItemIn,
)


def make_product(pid: str, **kw: Any) -> Product:
    data: Dict[str, Any] = {
        "id": pid,
        "name": f"Produto {pid}",
        "brand": "Xiaomi",
        "price_retail": 100000,
        "stock_quantity": 5,
        "status": "active",
    }
    data.update(kw)
    return Product(**data)


def make_item(name: str = "Redmi Note 13, 256GB/8GB", **kw: Any) -> QuoteCartItemIn:
    data: Dict[str, Any] = {
        "product": make_product("p1", name=name, model_id="redmi-note-13",
                                specs={"ram": "8GB", "storage": "256GB"}),
        "variant": CartVariant(ram="8GB", storage="256GB"),
        "available_colors": ["Preto", "Azul"],
        "price": 129900,
        "installment_plan": InstallmentPlan(installments=10, value=14679, total=146787, label="10x"),
        "payment_options": PaymentOptions(show_cash=True, show_installment=True),
    }
    data.update(kw)
    return QuoteCartItemIn(**data)


class FakeStore:
    """
    In-memory CatalogStore.

    query_products filters on category/brand/search only, enough for the
    orchestrator tests. gates lets a test hold a query until it is released.
    """

    def __init__(self, products: Optional[List[Product]] = None) -> None:
        self.products = list(products or [])
        self.categories: List[CategorySummary] = []
        self.stock_by_category: Dict[str, bool] = {}
        self.settings_rows: Dict[str, Dict[str, Any]] = {}
        self.banners: List[Banner] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.fail_with: Optional[Exception] = None
        self.settings_error: Optional[Exception] = None
        self.settings_gate: Optional[asyncio.Event] = None
        self.calls: List[str] = []
        self.stock_checks: List[str] = []

    async def query_products(self, filters: CatalogFilters, page: int, page_size: int) -> ProductPage:
        self.calls.append(f"products:{filters.search or ''}:{page}")
        gate = self.gates.get(filters.search or "")
        if gate is not None:
            await gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

        rows = self.products
        if filters.search:
            needle = filters.search.lower()
            rows = [p for p in rows if needle in p.name.lower() or needle in p.brand.lower()]
        if filters.categories:
            rows = [p for p in rows if p.category_id in filters.categories]
        if filters.brands:
            rows = [p for p in rows if p.brand in filters.brands]

        start = (page - 1) * page_size
        chunk = rows[start:start + page_size]
        return ProductPage(rows=chunk, has_more=len(rows) > start + page_size)

    async def query_categories(self) -> List[CategorySummary]:
        return [CategorySummary(id=c.id, name=c.name) for c in self.categories]

    async def count_products_per_category(self) -> Dict[str, int]:
        return {c.id: c.count for c in self.categories}

    async def count_products_per_brand(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for p in self.products:
            counts[p.brand] = counts.get(p.brand, 0) + 1
        return counts

    async def category_has_stock(self, category_id: str) -> bool:
        self.stock_checks.append(category_id)
        # later categories answer first, output order must not depend on it
        await asyncio.sleep(0.001 * (10 - len(self.stock_checks)))
        return self.stock_by_category.get(category_id, False)

    async def get_settings(self, user_id: str) -> Optional[Dict[str, Any]]:
        self.calls.append(f"settings:{user_id}")
        if self.settings_gate is not None:
            await self.settings_gate.wait()
        if self.settings_error is not None:
            raise self.settings_error
        return self.settings_rows.get(user_id)

    async def save_settings(self, user_id: str, data: Dict[str, Any]) -> None:
        self.settings_rows[user_id] = dict(data)

    async def list_model_products(self, model_id: str) -> List[Product]:
        return [p for p in self.products if p.group_key == model_id]

    async def list_banners(self) -> List[Banner]:
        return list(self.banners)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def sample_group():
    base = datetime(2024, 1, 1)
    return [
        make_product("a1", model_id="m1", price_retail=150000, created_at=base,
                     specs={"ram": "8GB", "storage": "256GB", "color": "Preto", "color_hex": "#000000"}),
        make_product("a2", model_id="m1", price_retail=120000, created_at=base + timedelta(days=1),
                     specs={"ram": "6GB", "storage": "128GB", "color": "Azul", "color_hex": "#0000FF"}),
        make_product("a3", model_id="m1", price_retail=0, created_at=base + timedelta(days=2),
                     specs={"ram": "8GB", "storage": "128GB", "color": "Preto", "color_hex": "#111111"}),
    ]
