# kvikk_app/routes/shipping_rates.py
"""
Shopify carrier-service callback.

Shopify POSTs `{"rate": {...}}` here during checkout. The response is always a
200 with a `rates` list; checkout is never blocked by a Kvikk problem.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from kvikk_app.core.enums import RateOutcome
from kvikk_app.core.exceptions import SettingsStoreError
from kvikk_app.dependencies import get_rate_service, get_settings_store
from kvikk_app.schemas.rates import RateError, RateRequestBody, RatesResponse
from kvikk_app.services.rate_service import RateService
from kvikk_app.services.settings_store import SettingsStore

router = APIRouter(prefix="/api", tags=["shipping-rates"])

logger = logging.getLogger(__name__)


@router.post("/shipping-rates")
async def shipping_rates(
    request: Request,
    x_shopify_shop_domain: Optional[str] = Header(None),
    rate_service: RateService = Depends(get_rate_service),
    settings_store: SettingsStore = Depends(get_settings_store),
):
    """Quote Kvikk rates for a checkout"""
    try:
        body = await request.json()
        rate_request = RateRequestBody.model_validate(body).rate

        try:
            api_key = await settings_store.resolve_api_key(x_shopify_shop_domain)
        except SettingsStoreError as e:
            logger.error(f"Could not load merchant API key, using the default key: {str(e)}")
            api_key = None

        result = await rate_service.quote(rate_request, api_key)
        if result.outcome != RateOutcome.SUCCESS:
            logger.warning(f"Served fallback rates to {x_shopify_shop_domain} ({result.outcome.value}): {result.error}")

        return rate_service.quote_response(result)

    except Exception as e:
        logger.error(f"Shipping rate error: {str(e)}")
        return RatesResponse(errors=[RateError(message="Failed to fetch shipping rates")]).model_dump()
