# file: src/services/catalog_store.py
"""
The external data store behind the catalog.

CatalogStore is the interface the core talks to. SqlCatalogStore
implements it on SQLModel/SQLAlchemy. Every call is async: the blocking
SQL work runs in a worker thread, so an event loop serving the API is
never blocked by a slow database.

Database errors surface as TransientFetchError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar

from sqlalchemy import and_, func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from src.core.errors import TransientFetchError
from src.server.models.catalog import (
    BannerRecord,
    CatalogSettingsRecord,
    CategoryRecord,
    ProductRecord,
    utc_now,
)
from src.server.schemas.catalog import (
    Banner,
    CatalogFilters,
    CategorySummary,
    Product,
    ProductPage,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CatalogStore(Protocol):
    async def query_products(
        self, filters: CatalogFilters, page: int, page_size: int
    ) -> ProductPage:
        ...

    async def query_categories(self) -> List[CategorySummary]:
        ...

    async def count_products_per_category(self) -> Dict[str, int]:
        ...

    async def count_products_per_brand(self) -> Dict[str, int]:
        ...

    async def category_has_stock(self, category_id: str) -> bool:
        ...

    async def get_settings(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def save_settings(self, user_id: str, data: Dict[str, Any]) -> None:
        ...

    async def list_model_products(self, model_id: str) -> List[Product]:
        ...

    async def list_banners(self) -> List[Banner]:
        ...


class SqlCatalogStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def _run(self, fn: Callable[[Session], T]) -> T:
        def work() -> T:
            with Session(self.engine) as session:
                return fn(session)

        try:
            return await asyncio.to_thread(work)
        except SQLAlchemyError as e:
            logger.error("Data store query failed: %s", e)
            raise TransientFetchError(f"Data store unavailable: {e}") from e

    # ---- products --------------------------------------------------------------
    async def query_products(
        self,
        filters: CatalogFilters,
        page: int = 1,
        page_size: int = 12,
    ) -> ProductPage:
        """
        One page of products matching the filters.

        Ordering: featured first, then newest. One extra row is fetched to
        know whether another page exists.
        """
        page = max(int(page), 1)
        page_size = max(int(page_size), 1)

        def work(session: Session) -> ProductPage:
            stmt = select(ProductRecord)

            if filters.search:
                pattern = f"%{filters.search.strip()}%"
                stmt = stmt.where(
                    or_(
                        col(ProductRecord.name).ilike(pattern),
                        col(ProductRecord.brand).ilike(pattern),
                    )
                )
            # empty selection = no filter
            if filters.categories:
                stmt = stmt.where(col(ProductRecord.category_id).in_(filters.categories))
            if filters.brands:
                stmt = stmt.where(col(ProductRecord.brand).in_(filters.brands))
            if filters.price_range:
                low, high = filters.price_range
                stmt = stmt.where(ProductRecord.price_retail >= low, ProductRecord.price_retail <= high)
            if filters.in_stock_only:
                stmt = stmt.where(ProductRecord.stock_quantity > 0)
            if filters.featured_only:
                stmt = stmt.where(col(ProductRecord.featured).is_(True))
            if filters.new_only:
                stmt = stmt.where(col(ProductRecord.is_new).is_(True))

            stmt = (
                stmt.order_by(
                    col(ProductRecord.featured).desc(),
                    col(ProductRecord.created_at).desc(),
                    col(ProductRecord.id),
                )
                .offset((page - 1) * page_size)
                .limit(page_size + 1)
            )
            rows = session.exec(stmt).all()
            return ProductPage(
                rows=[r.to_product() for r in rows[:page_size]],
                has_more=len(rows) > page_size,
            )

        return await self._run(work)

    async def list_model_products(self, model_id: str) -> List[Product]:
        """Every product of a model group; a lone product is its own group."""
        def work(session: Session) -> List[Product]:
            stmt = (
                select(ProductRecord)
                .where(
                    or_(
                        ProductRecord.model_id == model_id,
                        and_(ProductRecord.id == model_id, col(ProductRecord.model_id).is_(None)),
                    )
                )
                .order_by(col(ProductRecord.created_at), col(ProductRecord.id))
            )
            return [r.to_product() for r in session.exec(stmt).all()]

        return await self._run(work)

    # ---- categories / brands ---------------------------------------------------
    async def query_categories(self) -> List[CategorySummary]:
        def work(session: Session) -> List[CategorySummary]:
            rows = session.exec(select(CategoryRecord).order_by(col(CategoryRecord.name))).all()
            return [CategorySummary(id=r.id, name=r.name) for r in rows]

        return await self._run(work)

    async def count_products_per_category(self) -> Dict[str, int]:
        def work(session: Session) -> Dict[str, int]:
            stmt = (
                select(ProductRecord.category_id, func.count())
                .where(col(ProductRecord.category_id).is_not(None))
                .group_by(ProductRecord.category_id)
            )
            return {cid: int(n) for cid, n in session.exec(stmt).all()}

        return await self._run(work)

    async def count_products_per_brand(self) -> Dict[str, int]:
        def work(session: Session) -> Dict[str, int]:
            stmt = (
                select(ProductRecord.brand, func.count())
                .where(ProductRecord.brand != "")
                .group_by(ProductRecord.brand)
            )
            return {brand: int(n) for brand, n in session.exec(stmt).all()}

        return await self._run(work)

    async def category_has_stock(self, category_id: str) -> bool:
        def work(session: Session) -> bool:
            stmt = (
                select(ProductRecord.id)
                .where(ProductRecord.category_id == category_id, ProductRecord.stock_quantity > 0)
                .limit(1)
            )
            return session.exec(stmt).first() is not None

        return await self._run(work)

    # ---- settings --------------------------------------------------------------
    async def get_settings(self, user_id: str) -> Optional[Dict[str, Any]]:
        def work(session: Session) -> Optional[Dict[str, Any]]:
            row = session.get(CatalogSettingsRecord, user_id)
            if row is None:
                return None
            data = dict(row.data or {})
            data["user_id"] = row.user_id
            data["updated_at"] = row.updated_at
            return data

        return await self._run(work)

    async def save_settings(self, user_id: str, data: Dict[str, Any]) -> None:
        """Upsert the flat settings record of a user."""
        def work(session: Session) -> None:
            payload = {k: v for k, v in data.items() if k not in ("user_id", "updated_at")}
            row = session.get(CatalogSettingsRecord, user_id)
            if row is None:
                row = CatalogSettingsRecord(user_id=user_id)
            row.data = payload
            row.updated_at = utc_now()
            session.add(row)
            session.commit()

        await self._run(work)

    # ---- banners ---------------------------------------------------------------
    async def list_banners(self) -> List[Banner]:
        def work(session: Session) -> List[Banner]:
            rows = session.exec(select(BannerRecord).order_by(col(BannerRecord.display_order))).all()
            return [r.to_banner() for r in rows]

        return await self._run(work)
