from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

import yaml

from src.core.installments import PaymentFee
from src.server.settings.config import settings

logger = logging.getLogger(__name__)


def _load_raw_fees_yaml(path: Path) -> Any:
    """
    Read the fee table YAML. A missing or broken file yields an empty
    structure: the simulator then only offers the plain cash price.
    """
    if not path.exists():
        logger.warning("Payment fee table not found at %s", path)
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Could not read payment fee table %s: %s", path, e)
        return {}


def load_payment_fees(path: Optional[Path] = None) -> List[PaymentFee]:
    """
    Return the normalized fee rows.

    Accepts both layouts:

      1) top-level dict with "fees": [ {...}, {...} ]
      2) top-level list: [ {...}, {...} ]

    Rows without payment_method or with a non-numeric fee are skipped.
    """
    raw = _load_raw_fees_yaml(Path(path or settings.payment_fees_path))

    if isinstance(raw, dict):
        rows = raw.get("fees") or []
    elif isinstance(raw, list):
        rows = raw
    else:
        rows = []

    fees: List[PaymentFee] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        method = str(row.get("payment_method") or "").strip().lower()
        if not method:
            continue
        try:
            installments = int(row.get("installments", 1))
            applied_fee = float(row.get("applied_fee", 0) or 0)
        except (TypeError, ValueError):
            continue
        fees.append(PaymentFee(method, installments, applied_fee))

    return fees
