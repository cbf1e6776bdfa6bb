from typing import Optional


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class PlatformServiceError(BaseServiceError):
    """Base exception for external platform errors."""
    pass

class KvikkServiceError(PlatformServiceError):
    """Base exception for Kvikk-specific errors."""
    pass

class KvikkAPIError(KvikkServiceError):
    """Raised when Kvikk API calls fail."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 status_text: str = "", body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text
        self.body = body

class ShopifyServiceError(PlatformServiceError):
    """Base exception for Shopify-specific errors."""
    pass

class ShopifyAPIError(ShopifyServiceError):
    """Raised when Shopify Admin API calls fail."""
    pass

class SettingsStoreError(BaseServiceError):
    """Raised when merchant settings cannot be read or written."""
    pass

class WebhookProcessingError(BaseServiceError):
    """Raised when a webhook payload cannot be processed."""
    pass
