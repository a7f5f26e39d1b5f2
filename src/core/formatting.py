# src/core/formatting.py
"""
Formatting helpers (pt-BR).

- format_price: centavos -> "R$ 1.234,56"
- format_cep: "12345678" -> "12345-678"
- clean_product_name: strips a trailing "256GB/8GB" from free-text names
"""

import re
from typing import List, Optional

_TRAILING_MEMORY_RE = re.compile(r",?\s*\d+GB/\d+GB\s*$", re.IGNORECASE)
_NON_DIGITS_RE = re.compile(r"\D")


def _group_thousands(int_str: str) -> str:
    """Group the integer part with '.' every third digit, from the right."""
    s = "".join(ch for ch in int_str if ch.isdigit())
    if len(s) <= 3:
        return s
    parts: List[str] = []
    while s:
        parts.append(s[-3:])
        s = s[:-3]
    return ".".join(reversed(parts))


def format_price(cents: Optional[int]) -> str:
    """123456 -> 'R$ 1.234,56'. None counts as zero."""
    value = int(cents or 0)
    sign = "-" if value < 0 else ""
    int_part, dec_part = divmod(abs(value), 100)
    return "{}R$ {},{:02d}".format(sign, _group_thousands(str(int_part)), dec_part)


def only_digits(value: Optional[str]) -> str:
    return _NON_DIGITS_RE.sub("", value or "")


def format_cep(cep: str) -> str:
    clean = only_digits(cep)
    if len(clean) != 8:
        return clean
    return f"{clean[:5]}-{clean[5:]}"


def clean_product_name(name: Optional[str]) -> str:
    """
    Remove a trailing memory spec from a product name.

    "Redmi Note 13, 256GB/8GB" -> "Redmi Note 13"
    The variant is rendered separately in the quote, so the name must not
    carry a possibly stale copy of it.
    """
    return _TRAILING_MEMORY_RE.sub("", name or "").strip()
