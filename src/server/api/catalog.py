from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.core.installments import calculate_installments
from src.core.variants import extract_variants, find_product_by_specs
from src.server.api.deps import get_settings_service, get_store
from src.server.schemas.catalog import (
    Banner,
    BrandSummary,
    CatalogFilters,
    CatalogPage,
    CategorySummary,
    Product,
    ProductVariants,
    VariantSpecs,
)
from src.server.schemas.quote import InstallmentPlan
from src.services.banners import get_active_banners
from src.services.catalog_query import CatalogQueryOrchestrator, list_brands, list_visible_categories
from src.services.catalog_settings import CatalogSettingsService
from src.services.catalog_store import CatalogStore
from src.services.payment_fees import load_payment_fees
from src.server.settings.config import settings

router = APIRouter(prefix="/catalog", tags=["catalog"])


# ==============================
# PRODUCTS
# ==============================

@router.get("/products", response_model=CatalogPage, summary="Search the catalog")
async def list_products(
    search: Optional[str] = None,
    categories: List[str] = Query(default=[]),
    brands: List[str] = Query(default=[]),
    min_price: Optional[int] = Query(default=None, ge=0),
    max_price: Optional[int] = Query(default=None, ge=0),
    in_stock_only: bool = False,
    featured_only: bool = False,
    new_only: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=100),
    user_id: Optional[str] = None,
    store: CatalogStore = Depends(get_store),
    settings_service: CatalogSettingsService = Depends(get_settings_service),
):
    price_range = None
    if min_price is not None or max_price is not None:
        low = min_price or 0
        high = max_price if max_price is not None else 2**31 - 1
        if low > high:
            raise HTTPException(status_code=422, detail="min_price must be <= max_price")
        price_range = (low, high)

    filters = CatalogFilters(
        search=(search or "").strip() or None,
        categories=categories,
        brands=brands,
        price_range=price_range,
        in_stock_only=in_stock_only,
        featured_only=featured_only,
        new_only=new_only,
    )
    orchestrator = CatalogQueryOrchestrator(
        store, settings_service, page_size=page_size, user_id=user_id
    )
    return await orchestrator.fetch_page(page, filters)


@router.get("/categories", response_model=List[CategorySummary])
async def list_categories(
    user_id: Optional[str] = None,
    store: CatalogStore = Depends(get_store),
    settings_service: CatalogSettingsService = Depends(get_settings_service),
):
    catalog_settings = await settings_service.get_settings(user_id)
    return await list_visible_categories(store, catalog_settings)


@router.get("/brands", response_model=List[BrandSummary])
async def brands(store: CatalogStore = Depends(get_store)):
    return await list_brands(store)


# ==============================
# MODEL GROUPS / VARIANTS
# ==============================

@router.get("/models/{model_id}/variants", response_model=ProductVariants)
async def model_variants(model_id: str, store: CatalogStore = Depends(get_store)):
    products = await store.list_model_products(model_id)
    if not products:
        raise HTTPException(status_code=404, detail="Model not found")
    return extract_variants(products)


@router.get("/models/{model_id}/match", response_model=Product)
async def model_match(
    model_id: str,
    ram: Optional[str] = None,
    storage: Optional[str] = None,
    color: Optional[str] = None,
    store: CatalogStore = Depends(get_store),
):
    products = await store.list_model_products(model_id)
    product = find_product_by_specs(
        products,
        VariantSpecs(ram=ram or None, storage=storage or None, color=color or None),
    )
    if product is None:
        raise HTTPException(status_code=404, detail="No product matches the selected variant")
    return product


# ==============================
# BANNERS / INSTALLMENTS
# ==============================

@router.get("/banners", response_model=List[Banner])
async def banners(store: CatalogStore = Depends(get_store)):
    return await get_active_banners(store)


@router.get("/installments", response_model=List[InstallmentPlan])
def installments(
    price: int = Query(..., ge=0, description="Price in centavos"),
    max_installments: int = Query(12, ge=1, le=24),
):
    return calculate_installments(price, load_payment_fees(), max_installments)
