"""
Core module exports.
"""
from .enums import (
    ServiceType,
    ShipmentStatus,
    RateOutcome,
    ShipmentOutcome,
    WebhookTopic
)

from .exceptions import (
    BaseServiceError,
    PlatformServiceError,
    KvikkServiceError,
    KvikkAPIError,
    ShopifyServiceError,
    ShopifyAPIError,
    SettingsStoreError,
    WebhookProcessingError
)
