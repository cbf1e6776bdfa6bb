# kvikk_app/services/shipping/payload_builder.py
"""
Kvikk Payload Builder

Converts Shopify carrier-service rate requests and Shopify orders into
Kvikk API payloads (/v1/rates and /v1/shipments).
"""

import logging
from typing import Dict, Any, Optional, List, Tuple

from kvikk_app.core.config import KvikkConfig
from kvikk_app.core.enums import ServiceType
from kvikk_app.schemas.rates import RateRequest
from kvikk_app.schemas.settings import SenderProfile
from kvikk_app.services.shipping import units

logger = logging.getLogger(__name__)


# Services requested for every quote
REQUESTED_SERVICE_TYPES = [
    ServiceType.STANDARD.value,
    ServiceType.EXPRESS.value,
    ServiceType.ECONOMY.value,
]

# Shipping line code keyword -> Kvikk service, checked in order.
# A code matching nothing is a standard shipment.
SERVICE_TYPE_KEYWORDS: List[Tuple[str, ServiceType]] = [
    ("express", ServiceType.EXPRESS),
    ("economy", ServiceType.ECONOMY),
]


def resolve_service_type(shipping_line: Optional[Dict[str, Any]]) -> ServiceType:
    """
    Map a Shopify shipping line to a Kvikk service type.

    Args:
        shipping_line: Shopify order shipping line (uses `code`, then `service_code`)

    Returns:
        ServiceType enum value
    """
    shipping_line = shipping_line or {}
    code = str(shipping_line.get("code") or shipping_line.get("service_code") or ServiceType.STANDARD.value)
    code = code.lower()

    matches = [service for keyword, service in SERVICE_TYPE_KEYWORDS if keyword in code]
    if len(matches) > 1:
        logger.warning(
            f"Shipping line code '{code}' matches several services "
            f"({', '.join(m.value for m in matches)}), using {matches[0].value}"
        )
    return matches[0] if matches else ServiceType.STANDARD


def _parse_amount(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class KvikkPayloadBuilder:
    """
    Builds Kvikk API payloads from Shopify data.

    Supports:
    - Carrier-service rate requests (checkout)
    - Orders (shipment creation)
    """

    def __init__(self, config: KvikkConfig):
        self.config = config

    def build_rate_request(self, rate_request: RateRequest) -> Dict[str, Any]:
        """
        Build the /v1/rates payload.

        Incomplete origins fall back to the Budapest depot; the destination is
        passed through as received.
        """
        origin = rate_request.origin
        destination = rate_request.destination
        items = rate_request.items

        return {
            "origin": {
                "postal_code": origin.postal_code or self.config.default_origin_postal_code,
                "country_code": origin.resolved_country or self.config.default_origin_country,
                "city": origin.city,
            },
            "destination": {
                "postal_code": destination.postal_code,
                "country_code": destination.resolved_country,
                "city": destination.city,
            },
            "packages": [{
                "weight": units.total_weight(items),
                "dimensions": units.package_dimensions(items),
                "value": units.total_value(items),
                "contents": units.rate_contents(items),
            }],
            "service_types": list(REQUESTED_SERVICE_TYPES),
        }

    def _build_recipient(self, order: Dict[str, Any]) -> Dict[str, Any]:
        addr = order.get("shipping_address") or {}

        return {
            "name": f"{addr.get('first_name') or ''} {addr.get('last_name') or ''}".strip(),
            "company": addr.get("company") or "",
            "address_line_1": addr.get("address1"),
            "address_line_2": addr.get("address2") or "",
            "city": addr.get("city"),
            "postal_code": addr.get("zip"),
            "country_code": addr.get("country_code"),
            "phone": addr.get("phone") or order.get("phone") or "",
            "email": order.get("email"),
        }

    def build_shipment(
        self,
        order: Dict[str, Any],
        sender: SenderProfile,
        service_type: ServiceType,
    ) -> Dict[str, Any]:
        """
        Build the /v1/shipments payload for a Shopify order.

        Args:
            order: Shopify order webhook payload
            sender: Merchant sender profile
            service_type: Kvikk service to book

        Returns:
            Kvikk shipment payload
        """
        line_items = order.get("line_items") or []
        value = _parse_amount(order.get("subtotal_price"))

        return {
            "reference": order.get("order_number"),
            "recipient": self._build_recipient(order),
            "sender": sender.model_dump(),
            "packages": [{
                "weight": units.total_weight(line_items),
                "dimensions": units.package_dimensions(line_items),
                "value": value,
                "currency": order.get("currency"),
                "contents": units.shipment_contents(line_items),
            }],
            "service_type": service_type.value,
            "insurance": value > self.config.insurance_threshold,
            "signature_required": value > self.config.signature_threshold,
        }
