# src/core/installments.py
"""
Installment plans from a payment-fee table.

Fee rows look like the payment_fees table of the storefront:
  {"payment_method": "credit", "installments": 10, "applied_fee": 12.5}
applied_fee is a percentage on top of the price.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from src.server.schemas.quote import InstallmentPlan

HIGHLIGHTED_INSTALLMENTS = 10


@dataclass(frozen=True)
class PaymentFee:
    payment_method: str
    installments: int
    applied_fee: float = 0.0


def _find_fee(
    fees: Iterable[PaymentFee],
    method: str,
    installments: int,
) -> Optional[PaymentFee]:
    for fee in fees:
        if fee.payment_method == method and fee.installments == installments:
            return fee
    return None


def _with_fee(price_cents: int, fee: Optional[PaymentFee]) -> int:
    if fee is None:
        return price_cents
    return int(round(price_cents * (1 + fee.applied_fee / 100.0)))


def calculate_installments(
    price_cents: int,
    fees: Iterable[PaymentFee],
    max_installments: int = 12,
) -> List[InstallmentPlan]:
    """
    Build the plans shown in the installment simulator.

    Order:
      1) PIX cash plan (uses the pix/1 fee when present, else the plain price)
      2) one plan per credit fee row, 1x .. max_installments

    Credit installments without a fee row are skipped. 10x is highlighted.
    """
    fees = list(fees)
    plans: List[InstallmentPlan] = []

    pix_total = _with_fee(price_cents, _find_fee(fees, "pix", 1))
    plans.append(
        InstallmentPlan(
            installments=1,
            value=pix_total,
            total=pix_total,
            label="À VISTA (PIX)",
            highlighted=True,
        )
    )

    for n in range(1, max_installments + 1):
        fee = _find_fee(fees, "credit", n)
        if fee is None:
            continue
        total = _with_fee(price_cents, fee)
        plans.append(
            InstallmentPlan(
                installments=n,
                value=int(round(total / n)),
                total=total,
                label=f"{n}x",
                highlighted=n == HIGHLIGHTED_INSTALLMENTS,
            )
        )

    return plans
