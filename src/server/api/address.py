from fastapi import APIRouter

from src.server.schemas.catalog import Address
from src.services.address_lookup import lookup_cep

router = APIRouter(prefix="/address", tags=["address"])


@router.get("/{cep}", response_model=Address, summary="Delivery address by CEP")
def address_by_cep(cep: str):
    # ValidationError -> 422, TransientFetchError -> 503 (see main.py)
    return lookup_cep(cep)
