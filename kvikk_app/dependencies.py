from typing import Callable, Optional

from fastapi import Depends, Header, Query

from kvikk_app.core.config import KvikkConfig, Settings, get_settings
from kvikk_app.database import async_session
from kvikk_app.services.rate_service import RateService
from kvikk_app.services.settings_store import SettingsStore, SQLAlchemySettingsStore
from kvikk_app.services.shipment_records import ShipmentRecordStore, SQLAlchemyShipmentRecordStore
from kvikk_app.services.shipment_service import ShipmentService
from kvikk_app.services.shipping.base import BaseCarrier
from kvikk_app.services.shipping.carriers.kvikk import KvikkCarrier
from kvikk_app.services.shopify.client import ShopifyAdminClient
from kvikk_app.services.webhook_handlers import WebhookHandlers

CarrierFactory = Callable[[Optional[str]], BaseCarrier]
ShopifyClientFactory = Callable[[str], Optional[ShopifyAdminClient]]


def get_kvikk_config(settings: Settings = Depends(get_settings)) -> KvikkConfig:
    return settings.kvikk_config()


def get_carrier_factory(config: KvikkConfig = Depends(get_kvikk_config)) -> CarrierFactory:
    def factory(api_key: Optional[str] = None) -> BaseCarrier:
        return KvikkCarrier(config, api_key=api_key)
    return factory


def get_shopify_client_factory(settings: Settings = Depends(get_settings)) -> ShopifyClientFactory:
    def factory(shop: str) -> Optional[ShopifyAdminClient]:
        if not shop or not settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN:
            return None
        return ShopifyAdminClient(shop, settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN, settings.SHOPIFY_API_VERSION)
    return factory


def get_settings_store(config: KvikkConfig = Depends(get_kvikk_config)) -> SettingsStore:
    return SQLAlchemySettingsStore(config, async_session)


def get_shipment_record_store() -> ShipmentRecordStore:
    return SQLAlchemyShipmentRecordStore(async_session)


def get_rate_service(
    config: KvikkConfig = Depends(get_kvikk_config),
    carrier_factory: CarrierFactory = Depends(get_carrier_factory),
) -> RateService:
    return RateService(config, carrier_factory)


def get_shipment_service(
    config: KvikkConfig = Depends(get_kvikk_config),
    settings_store: SettingsStore = Depends(get_settings_store),
    record_store: ShipmentRecordStore = Depends(get_shipment_record_store),
    carrier_factory: CarrierFactory = Depends(get_carrier_factory),
    shopify_client_factory: ShopifyClientFactory = Depends(get_shopify_client_factory),
) -> ShipmentService:
    return ShipmentService(config, settings_store, record_store, carrier_factory, shopify_client_factory)


def get_webhook_handlers(shipment_service: ShipmentService = Depends(get_shipment_service)) -> WebhookHandlers:
    return WebhookHandlers(shipment_service)


def get_shop_domain(
    shop: Optional[str] = Query(None),
    x_shopify_shop_domain: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Shop the admin request is about: ?shop=, then the Shopify header, then the configured shop"""
    return shop or x_shopify_shop_domain or settings.SHOPIFY_SHOP_URL or "default"
