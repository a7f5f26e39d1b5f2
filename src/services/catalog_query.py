# file: src/services/catalog_query.py
"""
Catalog query orchestration for the storefront listing.

Holds the current search text, filters, page and loaded products.
Every load:
  1) waits for the CatalogSettings of the user (defaults only on failure)
  2) asks the data store for one page
  3) drops the result if a newer load started meanwhile
  4) applies the visibility rules
  5) replaces (reset) or appends (load more) the held products

A fetch superseded by a newer search/filter is cancelled and its result
ignored silently; it never shows up as an error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Tuple

from src.core.errors import CancelledFetchError
from src.core.visibility import apply_category_visibility_rules, apply_visibility_rules
from src.server.schemas.catalog import (
    BrandSummary,
    CatalogFilters,
    CatalogPage,
    CategorySummary,
    Product,
)
from src.server.schemas.settings import CatalogSettings
from src.server.settings.config import settings as app_settings
from src.services.catalog_settings import CatalogSettingsService
from src.services.catalog_store import CatalogStore
from src.services.favorites import FavoritesStore
from src.services.storage import MemoryStorage

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Erro ao carregar produtos"


async def list_visible_categories(
    store: CatalogStore,
    settings: CatalogSettings,
) -> List[CategorySummary]:
    """All categories with their product count, after category visibility rules."""
    categories, counts = await asyncio.gather(
        store.query_categories(),
        store.count_products_per_category(),
    )
    with_counts = [
        CategorySummary(id=c.id, name=c.name, count=counts.get(c.id, 0))
        for c in categories
    ]
    return await apply_category_visibility_rules(with_counts, settings, store.category_has_stock)


async def list_brands(store: CatalogStore) -> List[BrandSummary]:
    """Brands with product count, most used first."""
    counts = await store.count_products_per_brand()
    brands = [BrandSummary(name=name, count=n) for name, n in counts.items()]
    brands.sort(key=lambda b: (-b.count, b.name))
    return brands


class CatalogQueryOrchestrator:
    def __init__(
        self,
        store: CatalogStore,
        settings_service: CatalogSettingsService,
        *,
        page_size: Optional[int] = None,
        user_id: Optional[str] = None,
        favorites: Optional[FavoritesStore] = None,
    ) -> None:
        page_size = app_settings.default_page_size if page_size is None else page_size
        if page_size <= 0:
            raise ValueError("page_size must be > 0")

        self.store = store
        self.settings_service = settings_service
        self.page_size = page_size
        self.user_id = user_id
        self.favorites = favorites or FavoritesStore(MemoryStorage())

        self.products: List[Product] = []
        self.loading = False
        self.error: Optional[str] = None
        self.search_query = ""
        self.filters = CatalogFilters()
        self.page = 1
        self.has_more = True

        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    # ---- UI surface ------------------------------------------------------------
    async def set_search_query(self, text: str) -> CatalogPage:
        self.search_query = (text or "").strip()
        return await self.refresh()

    async def set_filters(self, filters: CatalogFilters) -> CatalogPage:
        self.filters = filters.model_copy(deep=True)
        return await self.refresh()

    async def refresh(self) -> CatalogPage:
        return await self._load(reset=True)

    async def load_more(self) -> CatalogPage:
        """Next page; no-op while a load is running or when nothing is left."""
        if self.loading or not self.has_more:
            return self.snapshot()
        return await self._load(reset=False)

    def toggle_favorite(self, product_id: str) -> bool:
        return self.favorites.toggle(product_id)

    async def filter_stats(self) -> Tuple[List[CategorySummary], List[BrandSummary]]:
        settings = await self.settings_service.get_settings(self.user_id)
        categories, brands = await asyncio.gather(
            list_visible_categories(self.store, settings),
            list_brands(self.store),
        )
        return categories, brands

    def snapshot(self) -> CatalogPage:
        return CatalogPage(products=list(self.products), has_more=self.has_more, page=self.page)

    def effective_filters(self) -> CatalogFilters:
        return self.filters.model_copy(update={"search": self.search_query or None})

    # ---- loading ---------------------------------------------------------------
    async def fetch_page(self, page: int, filters: Optional[CatalogFilters] = None) -> CatalogPage:
        """
        One visible page, without touching the held state.

        has_more is what the store reports for the raw page, the visibility
        rules may still drop rows from it.
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        settings = await self.settings_service.get_settings(self.user_id)
        result = await self.store.query_products(
            filters or self.effective_filters(), page, self.page_size
        )
        return CatalogPage(
            products=apply_visibility_rules(result.rows, settings),
            has_more=result.has_more,
            page=page,
        )

    async def _fetch(self, generation: int, page: int) -> Tuple[List[Product], bool]:
        result = await self.fetch_page(page)
        if generation != self._generation:
            raise CancelledFetchError(f"fetch #{generation} superseded")
        return result.products, result.has_more

    async def _load(self, reset: bool) -> CatalogPage:
        if reset and self._task is not None and not self._task.done():
            self._task.cancel()

        self._generation += 1
        generation = self._generation
        page = 1 if reset else self.page + 1

        self.loading = True
        self.error = None
        task = asyncio.create_task(self._fetch(generation, page))
        self._task = task

        try:
            products, has_more = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Catalog fetch #%s cancelled by a newer one", generation)
                return self.snapshot()
            raise
        except CancelledFetchError as e:
            logger.debug("Discarding stale catalog result: %s", e)
            return self.snapshot()
        except Exception as e:  # noqa: BLE001
            if generation != self._generation:
                logger.debug("Ignoring error of superseded fetch #%s: %s", generation, e)
                return self.snapshot()
            logger.error("Could not load catalog products: %s", e)
            self.error = str(e) or DEFAULT_ERROR_MESSAGE
            return self.snapshot()
        finally:
            if generation == self._generation:
                self.loading = False

        if reset:
            self.products = products
            self.page = 1
        else:
            self.products = self.products + products
            self.page = page
        self.has_more = has_more
        return self.snapshot()
