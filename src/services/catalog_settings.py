# file: src/services/catalog_settings.py

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from src.core.errors import ValidationError
from src.server.schemas.settings import CatalogSettings, default_settings
from src.server.settings.config import settings as app_settings
from src.services.catalog_store import CatalogStore

logger = logging.getLogger(__name__)


class CatalogSettingsService:
    """
    Loads CatalogSettings per user and keeps them for cache_minutes.

    Logic for get_settings():
      1) no user -> defaults (public catalog), never cached
      2) fresh cache entry -> cached copy
      3) store row -> parsed settings, cached
      4) no store row -> defaults for that user, cached
      5) store failure or unparsable row -> defaults, logged, NOT cached
         (next call retries)

    `loaded` turns True once the first get_settings() has returned,
    whatever the outcome. wait_loaded() blocks until then.
    """

    def __init__(
        self,
        store: CatalogStore,
        cache_minutes: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        minutes = app_settings.settings_cache_minutes if cache_minutes is None else cache_minutes
        self.cache_seconds = max(minutes, 0) * 60
        self._clock = clock
        self._cache: Dict[str, Tuple[float, CatalogSettings]] = {}
        self.loaded = False
        self._waiters: List[asyncio.Future] = []

    # ---- loaded signal ---------------------------------------------------------
    async def load(self, user_id: Optional[str] = None) -> CatalogSettings:
        return await self.get_settings(user_id)

    async def wait_loaded(self) -> None:
        if self.loaded:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    def _mark_loaded(self) -> None:
        if self.loaded:
            return
        self.loaded = True
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    # ---- read / write ----------------------------------------------------------
    async def get_settings(self, user_id: Optional[str] = None) -> CatalogSettings:
        value = await self._resolve(user_id)
        self._mark_loaded()
        return value

    async def _resolve(self, user_id: Optional[str]) -> CatalogSettings:
        if not user_id:
            return default_settings()

        cached = self._cache.get(user_id)
        if cached is not None:
            stored_at, value = cached
            if self._clock() - stored_at < self.cache_seconds:
                return value.model_copy(deep=True)
            del self._cache[user_id]

        try:
            data = await self.store.get_settings(user_id)
            if data is None:
                value = default_settings(user_id)
            else:
                value = CatalogSettings.from_flat({**data, "user_id": user_id})
        except PydanticValidationError as e:
            logger.error("Discarding invalid catalog settings for %s: %s", user_id, e)
            return default_settings(user_id)
        except Exception as e:  # noqa: BLE001
            logger.error("Could not load catalog settings for %s: %s", user_id, e)
            return default_settings(user_id)

        self._cache[user_id] = (self._clock(), value)
        return value.model_copy(deep=True)

    async def save_settings(
        self,
        new_settings: CatalogSettings,
        user_id: Optional[str] = None,
    ) -> CatalogSettings:
        """
        Upsert settings for a user and drop the cached copy.

        Store failures are raised: an admin must see that saving failed.
        """
        user_id = user_id or new_settings.user_id
        if not user_id:
            raise ValidationError("Saving catalog settings requires a user id")

        saved = new_settings.model_copy(
            update={"user_id": user_id, "updated_at": datetime.now(timezone.utc)}
        )
        await self.store.save_settings(user_id, saved.to_flat())
        self._cache.pop(user_id, None)
        return saved

    def clear_cache(self) -> None:
        self._cache.clear()
