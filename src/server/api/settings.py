from typing import Optional

from fastapi import APIRouter, Depends

from src.server.api.deps import get_settings_service
from src.server.schemas.settings import CatalogSettings
from src.services.catalog_settings import CatalogSettingsService

router = APIRouter(prefix="/catalog/settings", tags=["settings"])


@router.get("", response_model=CatalogSettings, summary="Catalog settings (defaults when unknown)")
async def read_settings(
    user_id: Optional[str] = None,
    service: CatalogSettingsService = Depends(get_settings_service),
):
    return await service.get_settings(user_id)


@router.put("", response_model=CatalogSettings, summary="Save catalog settings")
async def write_settings(
    payload: CatalogSettings,
    user_id: Optional[str] = None,
    service: CatalogSettingsService = Depends(get_settings_service),
):
    return await service.save_settings(payload, user_id)
