# kvikk_app/services/webhook_handlers.py
"""
Shopify order webhooks.

Only orders/create does work (automatic Kvikk shipment). Handlers never raise:
Shopify redelivers any webhook that is not acknowledged with a 2xx, and a
redelivered orders/create would book a second shipment.
"""

import json
import logging
from typing import Awaitable, Callable, Dict, Optional, Union

from kvikk_app.core.enums import ShipmentOutcome, WebhookTopic
from kvikk_app.core.exceptions import WebhookProcessingError
from kvikk_app.schemas.results import WebhookResult
from kvikk_app.services.shipment_service import ShipmentService

logger = logging.getLogger(__name__)

Handler = Callable[[str, str, Union[bytes, str], Optional[str]], Awaitable[WebhookResult]]


def parse_order(body: Union[bytes, str]) -> dict:
    try:
        order = json.loads(body)
    except (TypeError, ValueError) as e:
        raise WebhookProcessingError(f"Invalid webhook body: {str(e)}") from e
    if not isinstance(order, dict):
        raise WebhookProcessingError("Webhook body is not a JSON object")
    return order


class WebhookHandlers:
    """Dispatch table keyed by webhook topic"""

    def __init__(self, shipment_service: ShipmentService):
        self.shipment_service = shipment_service
        self.handlers: Dict[str, Handler] = {
            WebhookTopic.ORDERS_CREATE.value: self.orders_create,
            WebhookTopic.ORDERS_UPDATED.value: self.orders_updated,
            WebhookTopic.ORDERS_FULFILLED.value: self.orders_fulfilled,
        }

    async def dispatch(self, topic: str, shop: str, body: Union[bytes, str],
                       webhook_id: Optional[str] = None) -> WebhookResult:
        normalized = WebhookTopic.normalize(topic)
        handler = self.handlers.get(normalized)
        if handler is None:
            logger.info(f"Ignoring webhook topic {topic} from {shop}")
            return WebhookResult(topic=normalized, shop=shop, webhook_id=webhook_id)

        try:
            return await handler(normalized, shop, body, webhook_id)
        except Exception as e:
            logger.exception(f"{normalized} webhook error ({shop}, {webhook_id}): {str(e)}")
            return WebhookResult(topic=normalized, shop=shop, webhook_id=webhook_id, error=str(e))

    async def orders_create(self, topic, shop, body, webhook_id=None) -> WebhookResult:
        try:
            order = parse_order(body)
        except WebhookProcessingError as e:
            logger.error(f"Orders create webhook error ({shop}): {str(e)}")
            return WebhookResult(topic=topic, shop=shop, webhook_id=webhook_id, error=str(e))

        logger.info(f"New order: {order.get('order_number')} - {shop}")

        if self.shipment_service.find_carrier_shipping_line(order) is None:
            return WebhookResult(topic=topic, shop=shop, webhook_id=webhook_id, handled=True)

        result = await self.shipment_service.process_order(order, shop)
        return WebhookResult(
            topic=topic,
            shop=shop,
            webhook_id=webhook_id,
            handled=True,
            shipment=result,
            error=result.error if result.outcome == ShipmentOutcome.FAILED else None,
        )

    async def orders_updated(self, topic, shop, body, webhook_id=None) -> WebhookResult:
        logger.info(f"Order updated: {shop}")
        return WebhookResult(topic=topic, shop=shop, webhook_id=webhook_id, handled=True)

    async def orders_fulfilled(self, topic, shop, body, webhook_id=None) -> WebhookResult:
        logger.info(f"Order fulfilled: {shop}")
        return WebhookResult(topic=topic, shop=shop, webhook_id=webhook_id, handled=True)
