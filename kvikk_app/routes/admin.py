# kvikk_app/routes/admin.py
"""
Merchant admin page.

GET /app renders the settings form together with status badges and the most
recent Kvikk shipments. POST /app is a form post discriminated by `_action`:

- save_settings: persist the submitted form and re-render the page
- test_connection: check a Kvikk API key, answers with JSON
"""

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from kvikk_app.core.enums import ServiceType
from kvikk_app.core.exceptions import KvikkAPIError, SettingsStoreError
from kvikk_app.dependencies import (
    CarrierFactory,
    get_carrier_factory,
    get_settings_store,
    get_shop_domain,
)
from kvikk_app.schemas.settings import API_KEY_MASK, MerchantSettingsUpdate
from kvikk_app.services.settings_store import SettingsStore

router = APIRouter(tags=["admin"])

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

RECENT_SHIPMENT_LIMIT = 10

STATUS_BADGES = {
    "delivered": "success",
    "in_transit": "info",
    "pending": "warning",
    "failed": "critical",
}


def status_badge(status: Optional[str]) -> str:
    return STATUS_BADGES.get((status or "").lower(), "info")


def _created_on(shipment: Dict[str, Any]) -> Optional[date]:
    created_at = shipment.get("created_at")
    if not created_at:
        return None
    try:
        created = datetime.fromisoformat(str(created_at).replace("Z", "+00:00"))
    except ValueError:
        return None
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc)
    return created.date()


def summarize_shipments(shipments: List[Dict[str, Any]], today: Optional[date] = None) -> Dict[str, Any]:
    """Most recent shipments plus the number created today"""
    today = today or datetime.now(timezone.utc).date()
    return {
        "recent": shipments[:RECENT_SHIPMENT_LIMIT],
        "today": sum(1 for shipment in shipments if _created_on(shipment) == today),
    }


async def recent_shipments(carrier_factory: CarrierFactory, api_key: Optional[str]) -> Dict[str, Any]:
    try:
        shipments = await carrier_factory(api_key).list_shipments()
    except Exception as e:
        logger.warning(f"Could not load recent shipments: {str(e)}")
        return {"recent": [], "today": 0}
    return summarize_shipments(shipments)


async def render_admin_page(
    request: Request,
    shop: str,
    settings_store: SettingsStore,
    carrier_factory: CarrierFactory,
    message: Optional[str] = None,
    error: Optional[str] = None,
    status_code: int = 200,
):
    try:
        merchant_settings = await settings_store.read_merchant_settings(shop)
        api_key = await settings_store.resolve_api_key(shop)
    except SettingsStoreError as e:
        logger.error(f"Admin page settings error for {shop}: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not load settings")

    shipments = await recent_shipments(carrier_factory, api_key)

    return templates.TemplateResponse(
        request,
        "app_index.html",
        {
            "shop": shop,
            "settings": merchant_settings,
            "shipments": shipments,
            "service_options": [service.value for service in ServiceType],
            "status_badge": status_badge,
            "message": message,
            "error": error,
        },
        status_code=status_code,
    )


@router.get("/app")
async def admin_index(
    request: Request,
    shop: str = Depends(get_shop_domain),
    settings_store: SettingsStore = Depends(get_settings_store),
    carrier_factory: CarrierFactory = Depends(get_carrier_factory),
):
    return await render_admin_page(request, shop, settings_store, carrier_factory)


@router.post("/app")
async def admin_action(
    request: Request,
    shop: str = Depends(get_shop_domain),
    settings_store: SettingsStore = Depends(get_settings_store),
    carrier_factory: CarrierFactory = Depends(get_carrier_factory),
):
    form = await request.form()
    action = form.get("_action")

    if action == "save_settings":
        try:
            update = MerchantSettingsUpdate(
                kvikk_api_key=form.get("kvikk_api_key"),
                default_service=form.get("default_service") or ServiceType.STANDARD.value,
                auto_create_shipments=form.get("auto_create_shipments") == "on",
                sender_name=form.get("sender_name"),
                sender_address=form.get("sender_address"),
                sender_city=form.get("sender_city"),
                sender_postal_code=form.get("sender_postal_code"),
                sender_country_code=form.get("sender_country_code"),
                sender_phone=form.get("sender_phone"),
            )
        except ValidationError as e:
            logger.warning(f"Invalid settings form for {shop}: {str(e)}")
            return await render_admin_page(
                request, shop, settings_store, carrier_factory,
                error="Invalid settings", status_code=400,
            )

        try:
            await settings_store.save_merchant_settings(shop, update)
        except SettingsStoreError as e:
            logger.error(f"Settings save error for {shop}: {str(e)}")
            return await render_admin_page(
                request, shop, settings_store, carrier_factory,
                error="Could not save settings", status_code=500,
            )

        return await render_admin_page(request, shop, settings_store, carrier_factory, message="Settings saved")

    if action == "test_connection":
        api_key = form.get("kvikk_api_key")
        if not api_key or api_key == API_KEY_MASK:
            try:
                api_key = await settings_store.resolve_api_key(shop)
            except SettingsStoreError as e:
                logger.error(f"Could not load stored API key for {shop}: {str(e)}")
                api_key = None

        try:
            success = await carrier_factory(api_key).test_connection()
        except KvikkAPIError as e:
            return JSONResponse({"testResult": {"success": False, "message": f"Connection error: {str(e)}"}})

        return JSONResponse({
            "testResult": {
                "success": success,
                "message": "Connection successful" if success else "Invalid API key",
            }
        })

    raise HTTPException(status_code=400, detail=f"Unknown action: {action}")
