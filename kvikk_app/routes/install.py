# kvikk_app/routes/install.py
"""
App installation: registers the Kvikk carrier service on the shop and creates
the shop's default settings record.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from kvikk_app.core.config import Settings, get_settings
from kvikk_app.core.exceptions import SettingsStoreError, ShopifyAPIError
from kvikk_app.dependencies import (
    ShopifyClientFactory,
    get_settings_store,
    get_shop_domain,
    get_shopify_client_factory,
)
from kvikk_app.services.settings_store import SettingsStore

router = APIRouter(prefix="/api/app", tags=["install"])

logger = logging.getLogger(__name__)


@router.post("/install")
async def install_app(
    shop: str = Depends(get_shop_domain),
    settings: Settings = Depends(get_settings),
    settings_store: SettingsStore = Depends(get_settings_store),
    shopify_client_factory: ShopifyClientFactory = Depends(get_shopify_client_factory),
):
    client = shopify_client_factory(shop)
    if client is None:
        raise HTTPException(status_code=400, detail="Shopify Admin API access token is not configured")

    callback_url = f"{settings.HOST.rstrip('/')}/api/shipping-rates"
    try:
        await client.create_carrier_service(settings.KVIKK_CARRIER_NAME, callback_url)
        await settings_store.initialize(shop)
    except (ShopifyAPIError, SettingsStoreError) as e:
        logger.error(f"Install error for {shop}: {str(e)}")
        raise HTTPException(status_code=500, detail="Installation failed")

    return {
        "success": True,
        "message": "Kvikk integration installed"
    }
