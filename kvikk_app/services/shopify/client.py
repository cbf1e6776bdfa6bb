# kvikk_app.services.shopify.client

import json
import logging
from typing import Dict, Optional, Any

import httpx

from kvikk_app.core.exceptions import ShopifyAPIError

logger = logging.getLogger(__name__)


METAFIELDS_SET_MUTATION = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id namespace key value }
    userErrors { field message }
  }
}
"""

TRACKING_NAMESPACE = "kvikk"


class ShopifyAdminClient:
    """
    Minimal Shopify Admin API client for what the Kvikk app writes to the shop:

    - REST: register the Kvikk carrier service (checkout rate callback)
    - GraphQL: store the Kvikk tracking number on an order (metafieldsSet)
    """

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        if not shop_domain or not access_token:
            raise ValueError("Shopify shop domain and Admin API access token must be set")

        self.shop_domain = shop_domain
        self.api_version = api_version
        self.base_url = f"https://{shop_domain}/admin/api/{api_version}"
        self.graphql_url = f"{self.base_url}/graphql.json"
        self.headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json"
        }
        self.transport = transport
        self.timeout = timeout

    async def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, headers=self.headers, json=payload)
        except httpx.RequestError as e:
            logger.error(f"Shopify network error: {str(e)}")
            raise ShopifyAPIError(f"Network error: {str(e)}")

        if not response.is_success:
            logger.error(f"Shopify API error {response.status_code}: {response.text}")
            raise ShopifyAPIError(f"Request failed ({response.status_code}): {response.text}")

        return response.json() if response.content else {}

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        result = await self._post(self.graphql_url, {"query": query, "variables": variables or {}})
        if result.get("errors"):
            raise ShopifyAPIError(f"GraphQL query failed: {json.dumps(result['errors'])}")
        return result.get("data") or {}

    async def create_carrier_service(self, name: str, callback_url: str) -> Dict[str, Any]:
        """Register the app as a carrier service so checkout calls our rate endpoint"""
        payload = {
            "carrier_service": {
                "name": name,
                "callback_url": callback_url,
                "service_discovery": True,
                "carrier_service_type": "api",
                "format": "json",
            }
        }
        result = await self._post(f"{self.base_url}/carrier_services.json", payload)
        logger.info(f"Carrier service '{name}' registered for {self.shop_domain}")
        return result.get("carrier_service") or {}

    async def set_order_tracking(self, order_id: Any, tracking_number: str, carrier_name: str) -> Dict[str, Any]:
        """
        Store tracking number and carrier on the order.

        metafieldsSet upserts on (order, namespace, key), so repeating the call for the
        same order overwrites instead of duplicating.
        """
        owner_id = f"gid://shopify/Order/{order_id}"
        variables = {
            "metafields": [
                {
                    "ownerId": owner_id,
                    "namespace": TRACKING_NAMESPACE,
                    "key": "tracking_number",
                    "type": "single_line_text_field",
                    "value": str(tracking_number),
                },
                {
                    "ownerId": owner_id,
                    "namespace": TRACKING_NAMESPACE,
                    "key": "carrier",
                    "type": "single_line_text_field",
                    "value": carrier_name,
                },
            ]
        }
        data = await self.graphql(METAFIELDS_SET_MUTATION, variables)
        result = data.get("metafieldsSet") or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            raise ShopifyAPIError(f"metafieldsSet failed: {user_errors}")
        logger.info(f"Tracking number {tracking_number} stored on order {order_id}")
        return result
