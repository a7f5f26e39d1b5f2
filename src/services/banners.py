from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from src.server.schemas.catalog import Banner
from src.services.catalog_store import CatalogStore


def _naive(value: datetime) -> datetime:
    # compare everything as naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_banner_live(banner: Banner, now: datetime) -> bool:
    if not banner.is_active:
        return False
    now = _naive(now)
    if banner.start_date is not None and _naive(banner.start_date) > now:
        return False
    if banner.end_date is not None and _naive(banner.end_date) < now:
        return False
    return True


def select_active_banners(banners: Iterable[Banner], now: Optional[datetime] = None) -> List[Banner]:
    """Banners for the carousel: active, inside their date window, by display_order."""
    now = now or datetime.now(timezone.utc)
    live = [b for b in banners if is_banner_live(b, now)]
    live.sort(key=lambda b: b.display_order)
    return live


async def get_active_banners(store: CatalogStore, now: Optional[datetime] = None) -> List[Banner]:
    return select_active_banners(await store.list_banners(), now)
