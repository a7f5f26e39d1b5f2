import threading
from typing import Dict

from fastapi import Depends, Header, Request

from src.services.cart_store import CART_STORAGE_KEY, QuoteCartStore
from src.services.catalog_settings import CatalogSettingsService
from src.services.catalog_store import CatalogStore
from src.services.favorites import FAVORITES_STORAGE_KEY, FavoritesStore
from src.services.storage import StorageBackend, check_key

SESSION_HEADER = "X-Session-Id"

_session_lock = threading.Lock()


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_settings_service(request: Request) -> CatalogSettingsService:
    return request.app.state.settings_service


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


def get_session_id(x_session_id: str = Header(..., alias=SESSION_HEADER)) -> str:
    # same rules as storage keys, the id ends up in a file name
    return check_key(x_session_id)


def get_cart(
    request: Request,
    session_id: str = Depends(get_session_id),
) -> QuoteCartStore:
    """
    The quote cart of the calling session.

    One store object per session lives on app.state, so concurrent
    requests of the same session share its lock and write order.
    """
    carts: Dict[str, QuoteCartStore] = request.app.state.carts
    with _session_lock:
        cart = carts.get(session_id)
        if cart is None:
            cart = QuoteCartStore(get_storage(request), f"{CART_STORAGE_KEY}.{session_id}")
            carts[session_id] = cart
    return cart


def get_favorites(
    request: Request,
    session_id: str = Depends(get_session_id),
) -> FavoritesStore:
    favorites: Dict[str, FavoritesStore] = request.app.state.favorites
    with _session_lock:
        store = favorites.get(session_id)
        if store is None:
            store = FavoritesStore(get_storage(request), f"{FAVORITES_STORAGE_KEY}.{session_id}")
            favorites[session_id] = store
    return store
