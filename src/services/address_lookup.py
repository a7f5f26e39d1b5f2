# file: src/services/address_lookup.py

from __future__ import annotations

import logging
from typing import Optional

import requests

from src.core.errors import TransientFetchError, ValidationError
from src.core.formatting import format_cep, only_digits
from src.server.schemas.catalog import Address

logger = logging.getLogger(__name__)

VIACEP_URL = "https://viacep.com.br/ws/{cep}/json/"
TIMEOUT_SECONDS = 5


def normalize_cep(cep: Optional[str]) -> str:
    """Digits only. Anything but exactly 8 digits is a ValidationError."""
    clean = only_digits(cep)
    if len(clean) != 8:
        raise ValidationError("CEP inválido. Deve conter 8 dígitos.")
    return clean


def lookup_cep(cep: str, session: Optional[requests.Session] = None) -> Address:
    """
    Look up a delivery address on ViaCEP.

    Returns:
      - Address with a masked cep (12345-678)
    Raises:
      - ValidationError for a malformed or unknown CEP
      - TransientFetchError when ViaCEP cannot be reached
    """
    clean = normalize_cep(cep)
    http = session or requests

    try:
        resp = http.get(VIACEP_URL.format(cep=clean), timeout=TIMEOUT_SECONDS)
        resp.raise_for_status()
        data = resp.json()
    except requests.RequestException as e:
        logger.warning("ViaCEP lookup failed for %s: %s", clean, e)
        raise TransientFetchError("Erro ao buscar CEP. Tente novamente.") from e
    except ValueError as e:
        logger.warning("ViaCEP returned invalid JSON for %s: %s", clean, e)
        raise TransientFetchError("Erro ao buscar CEP. Tente novamente.") from e

    if not isinstance(data, dict) or data.get("erro"):
        raise ValidationError("CEP não encontrado.")

    return Address(
        cep=format_cep(data.get("cep") or clean),
        street=data.get("logradouro") or "",
        neighborhood=data.get("bairro") or "",
        city=data.get("localidade") or "",
        state=data.get("uf") or "",
    )
