# src/server/schemas/settings.py
"""
CatalogSettings: one façade over the storefront configuration.

The storefront used to keep a flat record of ~80 loosely related fields.
Here they are grouped into sub-structs:

  rules      visibility rules (the only part the catalog core acts on)
  display    prices / stock / images / pagination / filters / layout / badges
  theme      theme mode and colors
  seo        meta tags and url options
  analytics  tracking flags
  general    catalog name and texts

The flat form is still what the data store keeps, so from_flat()/to_flat()
translate between the two.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class DisplayRules(BaseModel):
    hide_out_of_stock: bool = False
    hide_zero_price: bool = False
    hide_inactive: bool = True
    min_stock_to_show: int = 0
    hide_empty_categories: bool = True
    hide_categories_no_stock: bool = False
    show_product_count: bool = True


class DisplayPreferences(BaseModel):
    # prices
    show_prices: bool = True
    show_old_price: bool = True
    show_discount_badge: bool = True
    price_format: str = "R$ 0,00"
    # stock
    show_stock: bool = True
    show_stock_quantity: bool = False
    low_stock_threshold: int = 5
    show_low_stock_warning: bool = True
    # images
    show_product_images: bool = True
    image_quality: str = "high"
    enable_image_zoom: bool = True
    show_image_gallery: bool = True
    # pagination and sorting
    products_per_page: int = 12
    enable_infinite_scroll: bool = False
    default_sort: str = "recent"
    enable_sort_options: bool = True
    # filters
    show_filters: bool = True
    show_category_filter: bool = True
    show_brand_filter: bool = True
    show_price_filter: bool = True
    show_stock_filter: bool = True
    enable_search: bool = True
    search_placeholder: str = "Buscar produtos..."
    # layout
    layout_mode: str = "grid"
    grid_columns_mobile: int = 1
    grid_columns_tablet: int = 2
    grid_columns_desktop: int = 3
    grid_columns_wide: int = 4
    card_style: str = "modern"
    # categories
    category_display_style: str = "icons"
    category_icon_size: str = "large"
    show_category_icons: bool = True
    show_category_images: bool = False
    category_layout: str = "horizontal"
    # features
    enable_favorites: bool = True
    enable_share: bool = True
    enable_whatsapp_share: bool = True
    enable_product_comparison: bool = False
    enable_quick_view: bool = False
    show_related_products: bool = False
    # badges
    show_new_badge: bool = True
    new_product_days: int = 30
    show_featured_badge: bool = True
    show_out_of_stock_badge: bool = True
    show_low_stock_badge: bool = True
    # sharing
    enable_public_catalog: bool = True
    require_login: bool = False
    enable_qr_code: bool = True
    # notifications
    notify_low_stock: bool = False
    notify_out_of_stock: bool = False
    notification_email: Optional[str] = None
    # advanced
    custom_css: Optional[str] = None
    custom_header_html: Optional[str] = None
    custom_footer_html: Optional[str] = None


class ThemeSettings(BaseModel):
    theme_mode: str = "light"
    primary_color: str = "#DC2626"
    secondary_color: str = "#3B82F6"
    accent_color: str = "#10B981"
    background_color: str = "#F8FAFC"
    card_background: str = "#FFFFFF"
    text_primary: str = "#1E293B"
    text_secondary: str = "#64748B"


class SeoSettings(BaseModel):
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    og_image: Optional[str] = None
    enable_seo_friendly_urls: bool = True
    catalog_slug: Optional[str] = None


class AnalyticsSettings(BaseModel):
    track_views: bool = True
    track_clicks: bool = True
    track_shares: bool = True
    google_analytics_id: Optional[str] = None


class GeneralInfo(BaseModel):
    catalog_name: str = "Catálogo de Produtos"
    catalog_description: str = "Confira nossos produtos disponíveis"
    catalog_subtitle: Optional[str] = None
    welcome_message: Optional[str] = None


_SECTIONS = {
    "rules": DisplayRules,
    "display": DisplayPreferences,
    "theme": ThemeSettings,
    "seo": SeoSettings,
    "analytics": AnalyticsSettings,
    "general": GeneralInfo,
}

_TOP_LEVEL = ("user_id", "updated_at", "enable_cache", "cache_duration_minutes")


class CatalogSettings(BaseModel):
    user_id: Optional[str] = None
    updated_at: Optional[datetime] = None
    enable_cache: bool = True
    cache_duration_minutes: int = 15

    rules: DisplayRules = Field(default_factory=DisplayRules)
    display: DisplayPreferences = Field(default_factory=DisplayPreferences)
    theme: ThemeSettings = Field(default_factory=ThemeSettings)
    seo: SeoSettings = Field(default_factory=SeoSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    general: GeneralInfo = Field(default_factory=GeneralInfo)

    # -- visibility subset, flat access ----------------------------------------
    @property
    def hide_out_of_stock(self) -> bool:
        return self.rules.hide_out_of_stock

    @property
    def hide_zero_price(self) -> bool:
        return self.rules.hide_zero_price

    @property
    def hide_inactive(self) -> bool:
        return self.rules.hide_inactive

    @property
    def min_stock_to_show(self) -> int:
        return self.rules.min_stock_to_show

    @property
    def hide_empty_categories(self) -> bool:
        return self.rules.hide_empty_categories

    @property
    def hide_categories_no_stock(self) -> bool:
        return self.rules.hide_categories_no_stock

    # -- flat record <-> façade --------------------------------------------------
    @classmethod
    def from_flat(cls, data: Optional[Dict[str, Any]]) -> "CatalogSettings":
        """
        Build settings from the flat record kept in the data store.

        Every known key is routed to its sub-struct, unknown keys are dropped.
        None values are treated as "not set" so the default wins.
        """
        data = dict(data or {})
        sections: Dict[str, Dict[str, Any]] = {name: {} for name in _SECTIONS}
        top: Dict[str, Any] = {}

        for key, value in data.items():
            if value is None:
                continue
            if key in _TOP_LEVEL:
                top[key] = value
                continue
            for name, model in _SECTIONS.items():
                if key in model.model_fields:
                    sections[name][key] = value
                    break

        built = {name: _SECTIONS[name](**values) for name, values in sections.items()}
        return cls(**top, **built)

    def to_flat(self) -> Dict[str, Any]:
        flat: Dict[str, Any] = {
            "user_id": self.user_id,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "enable_cache": self.enable_cache,
            "cache_duration_minutes": self.cache_duration_minutes,
        }
        for name in _SECTIONS:
            flat.update(getattr(self, name).model_dump())
        return flat


def default_settings(user_id: Optional[str] = None) -> CatalogSettings:
    return CatalogSettings(user_id=user_id)
