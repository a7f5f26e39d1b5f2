# src/core/quote_message.py
"""
Quote message for WhatsApp, built from the quote cart.

Per item the message shows:
  - cleaned product name (trailing "256GB/8GB" removed)
  - ram/storage from the chosen variant
  - cash price              only if payment_options.show_cash
  - installment breakdown   only if payment_options.show_installment and > 1x
  - available colors        only if there are any
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence
from urllib.parse import quote

from src.core.errors import ValidationError
from src.core.formatting import clean_product_name, format_price, only_digits
from src.server.schemas.quote import QuoteCartItem

MIN_PHONE_DIGITS = 10


def _item_lines(index: int, item: QuoteCartItem) -> List[str]:
    lines = [
        "",
        f"{index}. *{clean_product_name(item.product.name)}*",
        f"   📱 {item.variant.ram}/{item.variant.storage}",
    ]

    if item.payment_options.show_cash:
        lines.append(f"   💰 {format_price(item.price)} à vista")

    plan = item.installment_plan
    if item.payment_options.show_installment and plan.installments > 1:
        lines.append(f"   💳 {plan.installments}x de {format_price(plan.value)}")
        lines.append(f"      Total: {format_price(plan.total)}")

    if item.available_colors:
        lines.append(f"   🎨 Cores: {', '.join(item.available_colors)}")

    return lines


def compose_multi_item_quote(
    items: Sequence[QuoteCartItem],
    today: Optional[date] = None,
) -> str:
    """Render the cart as a quote message. Empty cart -> empty string."""
    if not items:
        return ""

    today = today or date.today()
    lines = [
        "*📝 ORÇAMENTO DE PRODUTOS*",
        f"📅 Data: {today.strftime('%d/%m/%Y')}",
        "",
        "*ITENS:*",
    ]
    for index, item in enumerate(items, start=1):
        lines.extend(_item_lines(index, item))

    lines.extend(["", "---", "", "📞 *Entre em contato para finalizar seu pedido!*"])
    return "\n".join(lines)


def build_whatsapp_link(message: str, number: Optional[str] = None) -> str:
    """
    WhatsApp link with the message pre-filled.

    Without a number the user picks the recipient in the app.
    """
    encoded = quote(message, safe="")
    if not number:
        return f"whatsapp://send?text={encoded}"

    digits = only_digits(number)
    if len(digits) < MIN_PHONE_DIGITS:
        raise ValidationError(f"Invalid WhatsApp number: {number!r}")
    return f"https://wa.me/{digits}?text={encoded}"
