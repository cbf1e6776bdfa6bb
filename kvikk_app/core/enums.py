"""
Shared enums and constants used across the application.
"""

from enum import Enum


class ServiceType(str, Enum):
    """Kvikk service levels"""
    STANDARD = "standard"
    EXPRESS = "express"
    ECONOMY = "economy"


class ShipmentStatus(str, Enum):
    """Lifecycle of a locally recorded shipment"""
    PENDING = "PENDING"
    CREATED = "CREATED"
    FAILED = "FAILED"


class RateOutcome(str, Enum):
    SUCCESS = "SUCCESS"
    FALLBACK = "FALLBACK"
    ERROR = "ERROR"


class ShipmentOutcome(str, Enum):
    CREATED = "CREATED"
    SKIPPED = "SKIPPED"
    DUPLICATE = "DUPLICATE"
    FAILED = "FAILED"


class WebhookTopic(str, Enum):
    ORDERS_CREATE = "orders/create"
    ORDERS_UPDATED = "orders/updated"
    ORDERS_FULFILLED = "orders/fulfilled"

    @classmethod
    def normalize(cls, topic: str) -> str:
        # "ORDERS_CREATE" (SDK constant style) -> "orders/create"
        return (topic or "").strip().lower().replace("_", "/", 1)
