import asyncio
from datetime import datetime, timedelta

import pytest
from sqlmodel import Session

from src.server.db.session import init_db, make_engine
from src.server.models.catalog import BannerRecord, CategoryRecord, ProductRecord
from src.server.schemas.catalog import CatalogFilters
from src.services.catalog_store import SqlCatalogStore

BASE = datetime(2024, 1, 1)


@pytest.fixture
def store():
    engine = make_engine("sqlite://")
    init_db(engine)
    rows = [
        ProductRecord(id="r8", name="Redmi Note 13 8GB", brand="Xiaomi", model_id="note13",
                      category_id="cel", price_retail=150000, stock_quantity=3,
                      specs={"ram": "8GB", "storage": "256GB"}, created_at=BASE),
        ProductRecord(id="r6", name="Redmi Note 13 6GB", brand="Xiaomi", model_id="note13",
                      category_id="cel", price_retail=120000, stock_quantity=0,
                      specs={"ram": "6GB", "storage": "128GB"}, created_at=BASE + timedelta(days=1)),
        ProductRecord(id="a55", name="Galaxy A55", brand="Samsung", category_id="cel",
                      price_retail=220000, stock_quantity=5, featured=True, created_at=BASE),
        ProductRecord(id="fone", name="Fone BT", brand="JBL", category_id="audio",
                      price_retail=19900, stock_quantity=0, is_new=True, created_at=BASE + timedelta(days=2)),
    ]
    with Session(engine) as session:
        session.add_all(rows)
        session.add_all([
            CategoryRecord(id="cel", name="Celulares"),
            CategoryRecord(id="audio", name="Audio"),
            CategoryRecord(id="vazia", name="Acessórios"),
        ])
        session.add_all([
            BannerRecord(id="b2", title="Promo 2", image_url="x", display_order=2),
            BannerRecord(id="b1", title="Promo 1", image_url="y", display_order=1),
        ])
        session.commit()
    return SqlCatalogStore(engine)


def _query(store, page=1, page_size=10, **filters):
    return asyncio.run(store.query_products(CatalogFilters(**filters), page, page_size))


def test_ordering_featured_then_newest(store):
    page = _query(store)
    assert [p.id for p in page.rows] == ["a55", "fone", "r6", "r8"]
    assert page.has_more is False


def test_pagination_has_more(store):
    first = _query(store, page=1, page_size=3)
    assert len(first.rows) == 3 and first.has_more is True
    last = _query(store, page=2, page_size=3)
    assert [p.id for p in last.rows] == ["r8"] and last.has_more is False


def test_exact_page_size_has_no_more(store):
    page = _query(store, page_size=4)
    assert len(page.rows) == 4 and page.has_more is False


def test_filters(store):
    assert {p.id for p in _query(store, search="redmi").rows} == {"r6", "r8"}
    assert {p.id for p in _query(store, search="samsung").rows} == {"a55"}
    assert {p.id for p in _query(store, categories=["audio"]).rows} == {"fone"}
    assert {p.id for p in _query(store, brands=["Xiaomi", "JBL"]).rows} == {"r6", "r8", "fone"}
    assert {p.id for p in _query(store, price_range=(100000, 150000)).rows} == {"r6", "r8"}
    assert {p.id for p in _query(store, in_stock_only=True).rows} == {"r8", "a55"}
    assert {p.id for p in _query(store, featured_only=True).rows} == {"a55"}
    assert {p.id for p in _query(store, new_only=True).rows} == {"fone"}


def test_rows_become_products(store):
    [p] = _query(store, search="Note 13 8GB").rows
    assert p.specs == {"ram": "8GB", "storage": "256GB"}
    assert p.group_key == "note13"


def test_model_group(store):
    assert [p.id for p in asyncio.run(store.list_model_products("note13"))] == ["r8", "r6"]
    assert [p.id for p in asyncio.run(store.list_model_products("a55"))] == ["a55"]
    assert asyncio.run(store.list_model_products("r8")) == []


def test_categories_counts_and_stock(store):
    categories = asyncio.run(store.query_categories())
    assert [c.id for c in categories] == ["vazia", "audio", "cel"]
    assert asyncio.run(store.count_products_per_category()) == {"cel": 3, "audio": 1}
    assert asyncio.run(store.count_products_per_brand()) == {"Xiaomi": 2, "Samsung": 1, "JBL": 1}
    assert asyncio.run(store.category_has_stock("cel")) is True
    assert asyncio.run(store.category_has_stock("audio")) is False
    assert asyncio.run(store.category_has_stock("vazia")) is False


def test_settings_upsert(store):
    assert asyncio.run(store.get_settings("u1")) is None

    asyncio.run(store.save_settings("u1", {"user_id": "u1", "hide_zero_price": True}))
    asyncio.run(store.save_settings("u1", {"hide_zero_price": False, "min_stock_to_show": 2}))

    data = asyncio.run(store.get_settings("u1"))
    assert data["hide_zero_price"] is False
    assert data["min_stock_to_show"] == 2
    assert data["user_id"] == "u1"
    assert isinstance(data["updated_at"], datetime)


def test_banners_ordered(store):
    assert [b.id for b in asyncio.run(store.list_banners())] == ["b1", "b2"]
