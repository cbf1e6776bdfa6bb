# kvikk_app/services/shipment_service.py
"""
Automatic Kvikk shipment creation for new Shopify orders.

Flow for an order whose shipping line came from the Kvikk carrier service:
claim the order -> build payload -> POST /v1/shipments -> record the tracking
number -> write it back to the Shopify order.

Failures are logged and recorded on the shipment record; nothing is retried and
the merchant is not alerted.
"""

import logging
from typing import Any, Callable, Dict, Optional

from kvikk_app.core.config import KvikkConfig
from kvikk_app.core.enums import ServiceType, ShipmentOutcome
from kvikk_app.core.exceptions import KvikkAPIError, ShopifyAPIError
from kvikk_app.schemas.results import ShipmentResult
from kvikk_app.services.settings_store import SettingsStore
from kvikk_app.services.shipment_records import ShipmentRecordStore
from kvikk_app.services.shipping.base import BaseCarrier
from kvikk_app.services.shipping.payload_builder import KvikkPayloadBuilder, resolve_service_type
from kvikk_app.services.shopify.client import ShopifyAdminClient

logger = logging.getLogger(__name__)

TRACKING_CARRIER_NAME = "Kvikk"


class ShipmentService:
    """
    Builds and submits Kvikk shipments for Shopify orders.

    Args:
        config: Carrier configuration
        settings_store: Merchant settings (sender profile, API key, auto-create flag)
        record_store: Shipment records used as the per-order idempotency key
        carrier_factory: Builds a carrier client for a given API key
        shopify_client_factory: Builds a Shopify Admin client for a shop, or None
            when the app has no Admin API access for it
    """

    def __init__(
        self,
        config: KvikkConfig,
        settings_store: SettingsStore,
        record_store: ShipmentRecordStore,
        carrier_factory: Callable[[Optional[str]], BaseCarrier],
        shopify_client_factory: Optional[Callable[[str], Optional[ShopifyAdminClient]]] = None,
    ):
        self.config = config
        self.settings_store = settings_store
        self.record_store = record_store
        self.carrier_factory = carrier_factory
        self.shopify_client_factory = shopify_client_factory
        self.payload_builder = KvikkPayloadBuilder(config)

    def find_carrier_shipping_line(self, order: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """First shipping line whose source is exactly the Kvikk carrier service name"""
        for line in order.get("shipping_lines") or []:
            if line.get("source") == self.config.carrier_name:
                return line
        return None

    async def build_shipment_payload(self, order: Dict[str, Any], shop: str,
                                     service_type: ServiceType) -> Dict[str, Any]:
        sender = await self.settings_store.sender_profile(shop)
        return self.payload_builder.build_shipment(order, sender, service_type)

    async def submit_shipment(self, payload: Dict[str, Any], api_key: Optional[str]) -> Dict[str, Any]:
        """
        Raises:
            KvikkAPIError: carrier rejected the shipment or could not be reached
        """
        carrier = self.carrier_factory(api_key)
        return await carrier.create_shipment(payload)

    async def update_order_tracking(self, order_id: Any, shipment: Dict[str, Any], shop: str) -> bool:
        """
        Write the Kvikk tracking number back to the Shopify order.

        Keyed by order id: repeating it for the same order overwrites the same
        metafields. Returns False when nothing was written.
        """
        tracking_number = shipment.get("tracking_number")
        if not tracking_number:
            logger.warning(f"Kvikk returned no tracking number for order {order_id}")
            return False

        client = self.shopify_client_factory(shop) if self.shopify_client_factory else None
        if client is None:
            logger.warning(f"No Shopify Admin API access for {shop}, tracking not written to order {order_id}")
            return False

        try:
            await client.set_order_tracking(order_id, tracking_number, TRACKING_CARRIER_NAME)
        except ShopifyAPIError as e:
            logger.error(f"Could not write tracking number to order {order_id}: {str(e)}")
            return False
        return True

    async def process_order(self, order: Dict[str, Any], shop: str) -> ShipmentResult:
        """
        Create the Kvikk shipment for a new order, if it asked for Kvikk shipping.

        Never raises; the outcome says what happened.
        """
        shipping_line = self.find_carrier_shipping_line(order)
        if shipping_line is None:
            return ShipmentResult(outcome=ShipmentOutcome.SKIPPED, error="No Kvikk shipping line")

        order_key = order.get("id") or order.get("order_number")
        if order_key is None:
            logger.error(f"Order from {shop} has neither id nor order_number, shipment not created")
            return ShipmentResult(outcome=ShipmentOutcome.FAILED, error="Order has no id")
        order_id = str(order_key)
        order_number = str(order.get("order_number")) if order.get("order_number") is not None else None

        try:
            merchant = await self.settings_store.get_settings(shop)
            if not merchant.auto_create_shipments:
                logger.info(f"Automatic shipments are off for {shop}, order {order_number} skipped")
                return ShipmentResult(outcome=ShipmentOutcome.SKIPPED, order_id=order_id,
                                      error="Automatic shipment creation disabled")

            service_type = resolve_service_type(shipping_line)
            claimed = await self.record_store.claim(shop, order_id, order_number, service_type.value)
            if not claimed:
                logger.info(f"Shipment for order {order_number} ({shop}) already exists, skipping")
                return ShipmentResult(outcome=ShipmentOutcome.DUPLICATE, order_id=order_id,
                                      service_type=service_type.value)

            try:
                payload = await self.build_shipment_payload(order, shop, service_type)
                api_key = await self.settings_store.resolve_api_key(shop)
                shipment = await self.submit_shipment(payload, api_key)
            except KvikkAPIError as e:
                logger.error(f"Shipment creation error for order {order_number}: {str(e)}")
                await self.record_store.mark_failed(shop, order_id, str(e))
                return ShipmentResult(outcome=ShipmentOutcome.FAILED, order_id=order_id,
                                      service_type=service_type.value, error=str(e))
            except Exception as e:
                logger.exception(f"Unexpected shipment error for order {order_number}: {str(e)}")
                await self.record_store.mark_failed(shop, order_id, str(e))
                return ShipmentResult(outcome=ShipmentOutcome.FAILED, order_id=order_id,
                                      service_type=service_type.value, error=str(e))

            tracking_number = shipment.get("tracking_number")
            logger.info(f"Kvikk shipment created for order {order_number}: {tracking_number}")
            try:
                await self.record_store.mark_created(shop, order_id, tracking_number, shipment)
            except Exception as e:
                # Kvikk already holds the shipment, so the outcome stays CREATED
                logger.exception(f"Could not record shipment {tracking_number} for order {order_number}: {str(e)}")

            await self.update_order_tracking(order.get("id") or order_id, shipment, shop)

            return ShipmentResult(
                outcome=ShipmentOutcome.CREATED,
                order_id=order_id,
                tracking_number=tracking_number,
                service_type=service_type.value,
            )
        except Exception as e:
            logger.exception(f"Shipment creation error for order {order_number}: {str(e)}")
            return ShipmentResult(outcome=ShipmentOutcome.FAILED, order_id=order_id, error=str(e))
