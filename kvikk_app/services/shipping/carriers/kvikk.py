"""
Kvikk Carrier Implementation

This module implements the Kvikk shipping API integration.

Features:
- Rate calculation (POST /v1/rates)
- Shipment creation (POST /v1/shipments)
- Shipment listing (GET /v1/shipments)
- Credential check (GET /v1/test)

All requests authenticate with the X-API-KEY header.
"""

import json
import logging
from typing import Dict, Any, Optional, List

import httpx

from kvikk_app.core.config import KvikkConfig
from kvikk_app.core.exceptions import KvikkAPIError
from kvikk_app.services.shipping.base import BaseCarrier

logger = logging.getLogger(__name__)


class KvikkCarrier(BaseCarrier):
    """Kvikk carrier implementation."""

    def __init__(
        self,
        config: KvikkConfig,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Kvikk carrier.

        Args:
            config: Carrier configuration
            api_key: Merchant API key, defaults to the configured one
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.config = config
        self.api_key = api_key if api_key is not None else config.api_key
        self.base_url = config.api_url
        self.transport = transport

    def _get_headers(self) -> Dict[str, str]:
        """Get the standard headers for API requests"""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-API-KEY": self.api_key or "",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Any:
        """
        Make a request to the Kvikk API

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint (without base URL)
            data: Request payload for POST requests
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            KvikkAPIError: If the API request fails
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        logger.debug(f"Making {method} request to {url}")
        if data:
            logger.debug(f"Data: {json.dumps(data)[:500]}...")

        try:
            async with httpx.AsyncClient(timeout=self.config.http_timeout, transport=self.transport) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    json=data,
                    params=params
                )
        except httpx.TimeoutException as e:
            logger.error(f"Kvikk timeout error: {str(e)}")
            raise KvikkAPIError(f"Request timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Kvikk network error: {str(e)}")
            raise KvikkAPIError(f"Network error: {str(e)}")

        if not response.is_success:
            logger.error(f"Kvikk API error {response.status_code}: {response.text}")
            raise KvikkAPIError(
                f"Kvikk API error: {response.reason_phrase}",
                status_code=response.status_code,
                status_text=response.reason_phrase,
                body=response.text,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise KvikkAPIError(f"Invalid JSON from Kvikk: {str(e)}", status_code=response.status_code, body=response.text)

    async def get_rates(self, rate_request: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Get shipping rates for a potential shipment

        Returns:
            The `rates` list from the response (empty if absent)
        """
        result = await self._make_request("POST", "/v1/rates", data=rate_request)
        return (result or {}).get("rates") or []

    async def create_shipment(self, shipment_details: Dict[str, Any]) -> Dict[str, Any]:
        """Create a shipment with Kvikk

        Returns:
            API response with tracking number
        """
        result = await self._make_request("POST", "/v1/shipments", data=shipment_details)
        logger.info(f"Kvikk shipment created! Tracking number: {(result or {}).get('tracking_number', 'N/A')}")
        return result or {}

    async def list_shipments(self) -> List[Dict[str, Any]]:
        result = await self._make_request("GET", "/v1/shipments")
        return (result or {}).get("shipments") or []

    async def test_connection(self) -> bool:
        """True when Kvikk accepts the API key, False when it rejects it.

        Raises:
            KvikkAPIError: on network errors
        """
        try:
            await self._make_request("GET", "/v1/test")
        except KvikkAPIError as e:
            if e.status_code is None:
                raise
            return False
        return True
