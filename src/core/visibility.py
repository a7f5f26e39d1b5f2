# src/core/visibility.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence

from src.server.schemas.catalog import CategorySummary, Product
from src.server.schemas.settings import CatalogSettings

logger = logging.getLogger(__name__)

StockCheck = Callable[[str], Awaitable[bool]]


def is_product_visible(product: Product, settings: CatalogSettings) -> bool:
    if settings.hide_inactive and product.status != "active":
        return False
    if settings.hide_out_of_stock and (product.stock_quantity or 0) <= 0:
        return False
    if settings.hide_zero_price and (product.price_retail or 0) <= 0:
        return False
    # floor, applies whether or not any hide_* toggle is on
    if (product.stock_quantity or 0) < (settings.min_stock_to_show or 0):
        return False
    return True


def apply_visibility_rules(
    products: Sequence[Product],
    settings: CatalogSettings,
) -> List[Product]:
    """Keep the products that pass every enabled rule, in input order."""
    return [p for p in products if is_product_visible(p, settings)]


async def apply_category_visibility_rules(
    categories: Sequence[CategorySummary],
    settings: CatalogSettings,
    category_has_stock: StockCheck,
) -> List[CategorySummary]:
    """
    Filter categories for display.

    count is the number of products before product visibility rules.

    Rules:
      1) hide_empty_categories    -> drop count == 0
      2) hide_categories_no_stock -> ask the data store, one check per
         remaining category. The checks run concurrently; the output keeps
         the input order.
    """
    result = list(categories)

    if settings.hide_empty_categories:
        result = [c for c in result if c.count > 0]

    if settings.hide_categories_no_stock and result:
        flags = await asyncio.gather(*(category_has_stock(c.id) for c in result))
        hidden = [c.id for c, has_stock in zip(result, flags) if not has_stock]
        if hidden:
            logger.debug("Hiding categories without stock: %s", ", ".join(hidden))
        result = [c for c, has_stock in zip(result, flags) if has_stock]

    return result
