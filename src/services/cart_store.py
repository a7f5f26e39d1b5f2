# file: src/services/cart_store.py
"""
Quote cart: ordered cart lines with a durable copy in a StorageBackend.

States:
  UNINITIALIZED -> HYDRATING -> READY

Nothing is written to storage before READY. Otherwise a slow read at
startup could be overtaken by a write of the still-empty cart and the
saved quote would be lost.

Every mutation rewrites the whole cart. Storage failures are logged and
swallowed: the in-memory cart is always correct, durability is best effort.

Persisted layout (version 1):

  {"version": 1, "items": [ {...QuoteCartItem...}, ... ]}

A bare JSON list is the layout written by the old web storefront (version 0) and
is migrated on read.
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from src.core.errors import StorageCorruption
from src.server.schemas.quote import (
    QuoteCartItem,
    QuoteCartItemIn,
    QuoteCartItemUpdate,
)
from src.services.storage import StorageBackend

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "mercado_do_vale_quote_cart"
CART_FORMAT_VERSION = 1

# camelCase keys written by the old web storefront
_LEGACY_KEYS = {
    "availableColors": "available_colors",
    "installmentPlan": "installment_plan",
    "paymentOptions": "payment_options",
}
_LEGACY_PAYMENT_KEYS = {
    "showCash": "show_cash",
    "showInstallment": "show_installment",
}


class CartState(str, Enum):
    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    READY = "ready"


def new_item_id(existing: Optional[set] = None) -> str:
    """
    "<epoch ms>-<12 hex chars>", e.g. "1700000000000-3f9a0c6e21bd".

    48 random bits per millisecond; an id already in the cart is redrawn.
    """
    existing = existing or set()
    while True:
        candidate = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"
        if candidate not in existing:
            return candidate


def _migrate_item(raw: Dict[str, Any]) -> Dict[str, Any]:
    item = dict(raw)
    for old, new in _LEGACY_KEYS.items():
        if old in item and new not in item:
            item[new] = item.pop(old)

    options = item.get("payment_options")
    if isinstance(options, dict):
        options = dict(options)
        for old, new in _LEGACY_PAYMENT_KEYS.items():
            if old in options and new not in options:
                options[new] = options.pop(old)
        item["payment_options"] = options
    else:
        # old carts had no per-item options: show everything
        item["payment_options"] = {"show_cash": True, "show_installment": True}

    return item


def decode_cart(raw: Optional[str]) -> List[QuoteCartItem]:
    """
    Parse the persisted cart.

    Raises StorageCorruption when the blob as a whole is unusable
    (bad JSON, unknown version, items not a list). Single broken items are
    skipped with a warning.
    """
    if raw is None or not raw.strip():
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageCorruption(f"Quote cart is not valid JSON: {e}") from e

    if isinstance(data, list):
        version, rows = 0, data
    elif isinstance(data, dict):
        version = data.get("version")
        rows = data.get("items")
    else:
        raise StorageCorruption("Quote cart has an unexpected top-level type")

    if version not in (0, CART_FORMAT_VERSION):
        raise StorageCorruption(f"Unsupported quote cart version: {version!r}")
    if not isinstance(rows, list):
        raise StorageCorruption("Quote cart items must be a list")

    items: List[QuoteCartItem] = []
    seen = set()
    for row in rows:
        if not isinstance(row, dict):
            logger.warning("Skipping non-object quote cart entry")
            continue
        try:
            item = QuoteCartItem.model_validate(_migrate_item(row))
        except PydanticValidationError as e:
            logger.warning("Skipping invalid quote cart item: %s", e)
            continue
        if item.id in seen:
            logger.warning("Skipping duplicate quote cart item %s", item.id)
            continue
        seen.add(item.id)
        items.append(item)

    return items


def encode_cart(items: List[QuoteCartItem]) -> str:
    return json.dumps(
        {
            "version": CART_FORMAT_VERSION,
            "items": [item.model_dump(mode="json") for item in items],
        },
        ensure_ascii=False,
    )


class QuoteCartStore:
    """
    The quote cart of one session.

    The storage backend is injected, so tests can pass a MemoryStorage and
    the server a JsonFileStorage. With autoload=True (default) the cart is
    hydrated right away.
    """

    def __init__(
        self,
        storage: StorageBackend,
        key: str = CART_STORAGE_KEY,
        *,
        autoload: bool = True,
        id_factory: Callable[[set], str] = new_item_id,
    ) -> None:
        self.storage = storage
        self.key = key
        self.state = CartState.UNINITIALIZED
        self._id_factory = id_factory
        self._items: List[QuoteCartItem] = []
        self._lock = threading.RLock()
        if autoload:
            self.hydrate()

    # ---- state -----------------------------------------------------------------
    @property
    def ready(self) -> bool:
        return self.state is CartState.READY

    @property
    def items(self) -> List[QuoteCartItem]:
        """Copies of the lines; changing them does not touch the cart."""
        with self._lock:
            return [item.model_copy(deep=True) for item in self._items]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, item_id: str) -> Optional[QuoteCartItem]:
        with self._lock:
            for item in self._items:
                if item.id == item_id:
                    return item.model_copy(deep=True)
        return None

    # ---- hydration -------------------------------------------------------------
    def hydrate(self) -> None:
        """
        Load the persisted cart and move to READY.

        READY is reached even when the read fails (cart starts empty).
        Items added before hydration finished are kept after the stored ones.
        """
        with self._lock:
            if self.state is not CartState.UNINITIALIZED:
                return
            self.state = CartState.HYDRATING
            pending = self._items

            stored: List[QuoteCartItem] = []
            try:
                stored = decode_cart(self.storage.read(self.key))
            except StorageCorruption as e:
                logger.error("Discarding corrupt quote cart %s: %s", self.key, e)
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Could not read quote cart %s: %s", self.key, e)
            finally:
                self.state = CartState.READY

            stored_ids = {item.id for item in stored}
            self._items = stored + [item for item in pending if item.id not in stored_ids]
            if pending:
                self._persist()

    # ---- mutations -------------------------------------------------------------
    def add_item(self, item: Union[QuoteCartItemIn, Dict[str, Any]]) -> QuoteCartItem:
        """Append a line with a fresh id and persist. Returns the stored line."""
        if not isinstance(item, QuoteCartItemIn):
            item = QuoteCartItemIn.model_validate(dict(item))
        # dumped to plain data: the line owns its product snapshot
        data = item.model_dump()
        data.pop("id", None)
        with self._lock:
            existing = {i.id for i in self._items}
            new_item = QuoteCartItem.model_validate({**data, "id": self._id_factory(existing)})
            self._items.append(new_item)
            self._persist()
        return new_item.model_copy(deep=True)

    def remove_item(self, item_id: str) -> None:
        """Remove the line if present. Unknown ids are ignored."""
        with self._lock:
            self._items = [item for item in self._items if item.id != item_id]
            self._persist()

    def update_item(
        self,
        item_id: str,
        updates: Union[QuoteCartItemUpdate, Dict[str, Any]],
    ) -> Optional[QuoteCartItem]:
        """
        Merge the set fields of updates into the line.

        Returns the updated line, or None when the id is unknown (no error).
        """
        if not isinstance(updates, QuoteCartItemUpdate):
            updates = QuoteCartItemUpdate.model_validate(dict(updates))
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)

        updated: Optional[QuoteCartItem] = None
        with self._lock:
            new_items: List[QuoteCartItem] = []
            for item in self._items:
                if item.id == item_id:
                    item = QuoteCartItem.model_validate({**item.model_dump(), **changes})
                    updated = item
                new_items.append(item)
            self._items = new_items
            self._persist()
        return updated.model_copy(deep=True) if updated is not None else None

    def clear(self) -> None:
        with self._lock:
            self._items = []
            self._persist()

    # ---- persistence -----------------------------------------------------------
    def _persist(self) -> None:
        if not self.ready:
            return
        try:
            self.storage.write(self.key, encode_cart(self._items))
        except (OSError, TypeError, ValueError) as e:
            logger.error("Could not save quote cart %s: %s", self.key, e)
