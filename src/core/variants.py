# file: src/core/variants.py
"""
Variant extraction for model groups.

A model group is every product sharing a model_id (a product without
model_id is its own group). From a group we derive what the customer can
pick: RAM, storage, colors, and the price span.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from src.server.schemas.catalog import (
    ColorOption,
    PriceRange,
    Product,
    ProductVariants,
    VariantSpecs,
)


def group_products_by_model(products: Iterable[Product]) -> Dict[str, List[Product]]:
    """
    Partition products by model_id, falling back to the product id.

    Input order is kept both for the keys and inside every group.
    """
    grouped: Dict[str, List[Product]] = {}
    for product in products:
        grouped.setdefault(product.group_key, []).append(product)
    return grouped


def extract_variants(products: Iterable[Product]) -> ProductVariants:
    """
    Derive the selectable variants of one model group.

    - rams / storages: distinct values, sorted ascending (string order)
    - colors: first-seen order, deduplicated by name; hex comes from the
      product that introduced the color and is never overwritten
    - price_range: min/max over strictly positive prices, 0/0 when none
    """
    rams = set()
    storages = set()
    colors: Dict[str, ColorOption] = {}
    min_price: Optional[int] = None
    max_price: Optional[int] = None

    for product in products:
        ram = product.spec("ram")
        if ram:
            rams.add(ram)

        storage = product.spec("storage")
        if storage:
            storages.add(storage)

        color = product.spec("color")
        if color and color not in colors:
            colors[color] = ColorOption(name=color, hex=product.spec("color_hex"))

        price = product.price_retail or 0
        if price > 0:
            min_price = price if min_price is None else min(min_price, price)
            max_price = price if max_price is None else max(max_price, price)

    return ProductVariants(
        rams=sorted(rams),
        storages=sorted(storages),
        colors=list(colors.values()),
        price_range=PriceRange(min=min_price or 0, max=max_price or 0),
    )


def _matches(requested: Optional[str], actual: Optional[str]) -> bool:
    if requested is None:
        return True
    return requested == actual


def find_product_by_specs(
    products: Iterable[Product],
    specs: VariantSpecs,
) -> Optional[Product]:
    """
    First product (list order) matching every requested spec.

    A spec left as None is "don't care". Returns None when nothing matches.
    """
    for product in products:
        if (
            _matches(specs.ram, product.spec("ram"))
            and _matches(specs.storage, product.spec("storage"))
            and _matches(specs.color, product.spec("color"))
        ):
            return product
    return None
