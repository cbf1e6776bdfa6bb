import logging

from fastapi import APIRouter, Depends, HTTPException

from kvikk_app.core.exceptions import SettingsStoreError
from kvikk_app.dependencies import get_settings_store, get_shop_domain
from kvikk_app.schemas.settings import MerchantSettingsRead, MerchantSettingsUpdate
from kvikk_app.services.settings_store import SettingsStore

router = APIRouter(prefix="/api", tags=["settings"])

logger = logging.getLogger(__name__)


@router.get("/settings", response_model=MerchantSettingsRead)
async def read_settings(
    shop: str = Depends(get_shop_domain),
    settings_store: SettingsStore = Depends(get_settings_store),
):
    try:
        return await settings_store.read_merchant_settings(shop)
    except SettingsStoreError as e:
        logger.error(f"Settings read error for {shop}: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not load settings")


@router.post("/settings")
async def save_settings(
    update: MerchantSettingsUpdate,
    shop: str = Depends(get_shop_domain),
    settings_store: SettingsStore = Depends(get_settings_store),
):
    try:
        await settings_store.save_merchant_settings(shop, update)
    except SettingsStoreError as e:
        logger.error(f"Settings save error for {shop}: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not save settings")
    return {"success": True}
