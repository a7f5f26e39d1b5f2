# file: src/services/favorites.py

from __future__ import annotations

import json
import logging
import threading
from typing import Any, List, Optional

from src.services.storage import StorageBackend

logger = logging.getLogger(__name__)

FAVORITES_STORAGE_KEY = "catalog_favorites"
FAVORITES_FORMAT_VERSION = 1


def _load_favorites(storage: StorageBackend, key: str) -> List[str]:
    """
    Read the favorite product ids.

    Layout:
      {"version": 1, "product_ids": ["p1", "p2", ...]}

    A bare list (the old web storefront layout) is accepted too.
    If the blob is unreadable we start over empty rather than crash.
    """
    try:
        raw = storage.read(key)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Could not read favorites %s: %s", key, e)
        return []

    if raw is None or not raw.strip():
        return []

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Discarding corrupt favorites %s: %s", key, e)
        return []

    if isinstance(data, dict):
        data = data.get("product_ids")
    if not isinstance(data, list):
        logger.error("Discarding favorites %s: unexpected layout", key)
        return []

    cleaned: List[str] = []
    for product_id in data:
        if not isinstance(product_id, (str, int)):
            continue
        pid = str(product_id).strip()
        if pid and pid not in cleaned:
            cleaned.append(pid)
    return cleaned


class FavoritesStore:
    """Favorite product ids of one session, kept in insertion order."""

    def __init__(self, storage: StorageBackend, key: str = FAVORITES_STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key
        self._ids: List[str] = _load_favorites(storage, key)
        self._lock = threading.Lock()

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, product_id: object) -> bool:
        return str(product_id) in self._ids

    def is_favorite(self, product_id: Optional[str]) -> bool:
        return bool(product_id) and str(product_id) in self._ids

    def toggle(self, product_id: str) -> bool:
        """
        Flip favorite state for a product.

        Returns True if the product is a favorite afterwards.
        """
        pid = str(product_id).strip()
        if not pid:
            return False

        with self._lock:
            if pid in self._ids:
                self._ids.remove(pid)
                state = False
            else:
                self._ids.append(pid)
                state = True
            self._save()
        return state

    def _save(self) -> None:
        payload = {"version": FAVORITES_FORMAT_VERSION, "product_ids": self._ids}
        try:
            self.storage.write(self.key, json.dumps(payload, ensure_ascii=False))
        except OSError as e:
            logger.error("Could not save favorites %s: %s", self.key, e)
