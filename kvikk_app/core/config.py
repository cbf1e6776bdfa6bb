# kvikk_app/core/config.py

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class KvikkConfig:
    """Carrier configuration handed to each component at construction time."""
    api_url: str
    api_key: str
    carrier_name: str
    http_timeout: float
    insurance_threshold: float
    signature_threshold: float
    default_currency: str = "HUF"
    default_origin_postal_code: str = "1011"
    default_origin_country: str = "HU"


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # App
    HOST: str = "http://localhost:3000"
    PORT: int = 3000
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./kvikk_app.db"
    DB_AUTO_CREATE: bool = True

    # Shopify API
    SHOPIFY_API_KEY: str = ""
    SHOPIFY_API_SECRET: str = ""
    SHOPIFY_SHOP_URL: Optional[str] = None
    SHOPIFY_ADMIN_API_ACCESS_TOKEN: Optional[str] = None
    SHOPIFY_API_VERSION: str = "2023-10"

    # Kvikk API
    KVIKK_API_KEY: str = ""
    KVIKK_API_URL: str = "https://api.kvikk.hu"
    KVIKK_CARRIER_NAME: str = "Kvikk Shipping"
    KVIKK_HTTP_TIMEOUT: float = 30.0

    # Order subtotal thresholds (same units as Shopify's subtotal_price)
    INSURANCE_THRESHOLD: float = 50000
    SIGNATURE_THRESHOLD: float = 100000

    # Basic Auth for the admin screens
    BASIC_AUTH_USERNAME: str = "admin"
    BASIC_AUTH_PASSWORD: Optional[str] = None

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )

    def kvikk_config(self) -> KvikkConfig:
        return KvikkConfig(
            api_url=self.KVIKK_API_URL.rstrip("/"),
            api_key=self.KVIKK_API_KEY,
            carrier_name=self.KVIKK_CARRIER_NAME,
            http_timeout=self.KVIKK_HTTP_TIMEOUT,
            insurance_threshold=self.INSURANCE_THRESHOLD,
            signature_threshold=self.SIGNATURE_THRESHOLD,
        )


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
