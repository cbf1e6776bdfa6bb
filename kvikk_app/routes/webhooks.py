import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from kvikk_app.core.config import Settings, get_settings
from kvikk_app.core.security import verify_shopify_hmac
from kvikk_app.dependencies import get_webhook_handlers
from kvikk_app.services.webhook_handlers import WebhookHandlers

router = APIRouter(tags=["webhooks"])

logger = logging.getLogger(__name__)


async def verify_webhook_signature(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
):
    """Verify the Shopify webhook signature (skipped when no API secret is configured)"""
    if not settings.SHOPIFY_API_SECRET:
        return

    body = await request.body()
    if not verify_shopify_hmac(body, x_shopify_hmac_sha256, settings.SHOPIFY_API_SECRET):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")


@router.post("/api/webhooks")
async def shopify_webhook(
    request: Request,
    x_shopify_topic: str = Header(""),
    x_shopify_shop_domain: str = Header(""),
    x_shopify_webhook_id: Optional[str] = Header(None),
    handlers: WebhookHandlers = Depends(get_webhook_handlers),
    _: None = Depends(verify_webhook_signature),
):
    """Endpoint to receive Shopify order webhooks. Always acknowledged once verified."""
    body = await request.body()

    result = await handlers.dispatch(x_shopify_topic, x_shopify_shop_domain, body, x_shopify_webhook_id)
    if result.error:
        logger.error(f"Webhook {x_shopify_webhook_id} ({result.topic}) for {x_shopify_shop_domain} failed: {result.error}")

    return {"status": "received"}
