from typing import List

from fastapi import APIRouter, Depends, HTTPException

from src.core.quote_message import build_whatsapp_link, compose_multi_item_quote
from src.server.api.deps import get_cart, get_favorites
from src.server.schemas.quote import (
    QuoteCartItem,
    QuoteCartItemIn,
    QuoteCartItemUpdate,
    QuoteMessageOut,
)
from src.server.settings.config import settings
from src.services.cart_store import QuoteCartStore
from src.services.favorites import FavoritesStore

router = APIRouter(tags=["quote-cart"])


# ==============================
# QUOTE CART
# ==============================

@router.get("/quote-cart", response_model=List[QuoteCartItem])
def read_cart(cart: QuoteCartStore = Depends(get_cart)):
    return cart.items


@router.post("/quote-cart/items", response_model=QuoteCartItem, status_code=201)
def add_cart_item(payload: QuoteCartItemIn, cart: QuoteCartStore = Depends(get_cart)):
    return cart.add_item(payload)


@router.patch("/quote-cart/items/{item_id}", response_model=QuoteCartItem)
def update_cart_item(
    item_id: str,
    payload: QuoteCartItemUpdate,
    cart: QuoteCartStore = Depends(get_cart),
):
    item = cart.update_item(item_id, payload)
    if item is None:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return item


@router.delete("/quote-cart/items/{item_id}", status_code=204)
def remove_cart_item(item_id: str, cart: QuoteCartStore = Depends(get_cart)):
    cart.remove_item(item_id)


@router.delete("/quote-cart", status_code=204)
def clear_cart(cart: QuoteCartStore = Depends(get_cart)):
    cart.clear()


@router.get("/quote-cart/message", response_model=QuoteMessageOut)
def cart_message(cart: QuoteCartStore = Depends(get_cart)):
    message = compose_multi_item_quote(cart.items)
    link = build_whatsapp_link(message, settings.whatsapp_number) if message else None
    return QuoteMessageOut(message=message, whatsapp_link=link)


# ==============================
# FAVORITES
# ==============================

@router.get("/favorites", response_model=List[str])
def read_favorites(favorites: FavoritesStore = Depends(get_favorites)):
    return favorites.ids


@router.post("/favorites/{product_id}/toggle")
def toggle_favorite(product_id: str, favorites: FavoritesStore = Depends(get_favorites)):
    return {"product_id": product_id, "favorite": favorites.toggle(product_id)}
