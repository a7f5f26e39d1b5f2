# src/server/schemas/quote.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from src.server.schemas.catalog import Product


class InstallmentPlan(BaseModel):
    installments: int = 1
    value: int = 0            # per installment, centavos
    total: int = 0            # total to pay, centavos
    label: str = ""
    highlighted: bool = False


class PaymentOptions(BaseModel):
    show_cash: bool = True
    show_installment: bool = True


class CartVariant(BaseModel):
    ram: str = ""
    storage: str = ""


class QuoteCartItemIn(BaseModel):
    """
    A cart line without id, as handed over by the UI.

    product is a snapshot: price and specs are copied at add time, so later
    catalog changes do not touch a pending quote.
    """
    product: Product
    variant: CartVariant = Field(default_factory=CartVariant)
    available_colors: List[str] = Field(default_factory=list)
    price: int = Field(default=0, ge=0)
    installment_plan: InstallmentPlan = Field(default_factory=InstallmentPlan)
    payment_options: PaymentOptions = Field(default_factory=PaymentOptions)


class QuoteCartItem(QuoteCartItemIn):
    id: str


class QuoteCartItemUpdate(BaseModel):
    """Partial update; only fields that are set are merged into the item."""
    product: Optional[Product] = None
    variant: Optional[CartVariant] = None
    available_colors: Optional[List[str]] = None
    price: Optional[int] = Field(default=None, ge=0)
    installment_plan: Optional[InstallmentPlan] = None
    payment_options: Optional[PaymentOptions] = None


class QuoteMessageOut(BaseModel):
    message: str
    whatsapp_link: Optional[str] = None
