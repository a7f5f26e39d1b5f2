from datetime import date

import pytest

from src.core.errors import ValidationError
from src.core.quote_message import build_whatsapp_link, compose_multi_item_quote
from src.server.schemas.quote import InstallmentPlan, PaymentOptions, QuoteCartItem

from conftest import make_item


def _line(item_id, **kw):
    return QuoteCartItem(id=item_id, **make_item(**kw).model_dump())


def test_empty_cart_gives_empty_message():
    assert compose_multi_item_quote([]) == ""


def test_header_has_date():
    msg = compose_multi_item_quote([_line("1")], today=date(2024, 3, 5))
    assert "ORÇAMENTO" in msg
    assert "05/03/2024" in msg


def test_no_installment_lines_when_hidden_or_single():
    first = _line("1", payment_options=PaymentOptions(show_cash=True, show_installment=False))
    second = _line(
        "2",
        name="Galaxy A55",
        installment_plan=InstallmentPlan(installments=1, value=200000, total=200000, label="1x"),
    )
    msg = compose_multi_item_quote([first, second])
    assert "💳" not in msg
    assert "Total:" not in msg
    assert "1. *Redmi Note 13*" in msg
    assert "2. *Galaxy A55*" in msg


def test_installments_shown_when_enabled():
    msg = compose_multi_item_quote([_line("1")])
    assert "10x de R$ 146,79" in msg
    assert "Total: R$ 1.467,87" in msg


def test_name_is_cleaned_and_variant_rendered():
    msg = compose_multi_item_quote([_line("1")])
    assert "256GB/8GB" not in msg
    assert "8GB/256GB" in msg


def test_cash_price_only_when_enabled():
    shown = compose_multi_item_quote([_line("1")])
    assert "R$ 1.299,00 à vista" in shown

    hidden = compose_multi_item_quote(
        [_line("1", payment_options=PaymentOptions(show_cash=False, show_installment=True))]
    )
    assert "à vista" not in hidden


def test_colors_only_when_present():
    assert "Cores: Preto, Azul" in compose_multi_item_quote([_line("1")])
    assert "Cores" not in compose_multi_item_quote([_line("1", available_colors=[])])


def test_whatsapp_link_without_number():
    link = build_whatsapp_link("Olá mundo")
    assert link == "whatsapp://send?text=Ol%C3%A1%20mundo"


def test_whatsapp_link_with_number():
    link = build_whatsapp_link("oi", "+55 (11) 98765-4321")
    assert link == "https://wa.me/5511987654321?text=oi"


def test_whatsapp_link_rejects_short_number():
    with pytest.raises(ValidationError):
        build_whatsapp_link("oi", "12345")
