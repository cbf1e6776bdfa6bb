# tests/conftest.py
import json
import os

# Must be set before kvikk_app is imported: the engine and lifespan read them at import/startup
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DB_AUTO_CREATE", "false")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from kvikk_app.core.config import Settings, get_settings
from kvikk_app.database import init_models
from kvikk_app.dependencies import (
    get_carrier_factory,
    get_settings_store,
    get_shipment_record_store,
    get_shopify_client_factory,
)
from kvikk_app.main import app
from kvikk_app.services.settings_store import InMemorySettingsStore
from kvikk_app.services.shipment_records import InMemoryShipmentRecordStore
from kvikk_app.services.shipping.carriers.kvikk import KvikkCarrier
from kvikk_app.services.shopify.client import ShopifyAdminClient

SHOP = "test-shop.myshopify.com"
KVIKK_API_URL = "https://api.kvikk.test"


class FakeAPI:
    """
    Scriptable HTTP backend for httpx.MockTransport.

    Responses are keyed by (method, path); each entry is either (status, json_body)
    or an exception instance to raise (e.g. httpx.ConnectError).
    Unscripted requests get a 404.
    """

    def __init__(self):
        self.requests = []
        self.responses = {}

    def set_response(self, method, path, status_code=200, json_body=None):
        self.responses[(method.upper(), path)] = (status_code, json_body)

    def set_error(self, method, path, exc):
        self.responses[(method.upper(), path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        scripted = self.responses.get((request.method, request.url.path))
        if scripted is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(scripted, Exception):
            raise scripted
        status_code, json_body = scripted
        if json_body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def json_bodies(self, method, path):
        return [json.loads(r.content) for r in self.calls(method, path)]


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        _env_file=None,
        HOST="https://kvikk-app.test",
        DATABASE_URL="sqlite+aiosqlite://",
        DB_AUTO_CREATE=False,
        SHOPIFY_API_SECRET="",
        SHOPIFY_SHOP_URL=SHOP,
        SHOPIFY_ADMIN_API_ACCESS_TOKEN="shpat_test",
        KVIKK_API_KEY="env-key",
        KVIKK_API_URL=KVIKK_API_URL,
        KVIKK_CARRIER_NAME="Kvikk Shipping",
        BASIC_AUTH_USERNAME="admin",
        BASIC_AUTH_PASSWORD="secret",
    )


@pytest.fixture
def kvikk_config(settings):
    return settings.kvikk_config()


@pytest.fixture
def kvikk_api():
    return FakeAPI()


@pytest.fixture
def shopify_api():
    return FakeAPI()


@pytest.fixture
def carrier_factory(kvikk_config, kvikk_api):
    def factory(api_key=None):
        return KvikkCarrier(kvikk_config, api_key=api_key, transport=kvikk_api.transport)
    return factory


@pytest.fixture
def shopify_client_factory(settings, shopify_api):
    def factory(shop):
        return ShopifyAdminClient(
            shop,
            settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN,
            settings.SHOPIFY_API_VERSION,
            transport=shopify_api.transport,
        )
    return factory


@pytest.fixture
def settings_store(kvikk_config):
    return InMemorySettingsStore(kvikk_config)


@pytest.fixture
def record_store():
    return InMemoryShipmentRecordStore()


@pytest.fixture
async def session_factory(tmp_path):
    """SQLite database file per test, tables created from the models"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'kvikk_test.db'}")
    await init_models(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def test_client(settings, settings_store, record_store, carrier_factory, shopify_client_factory):
    """Provide a test client with overridden settings, stores and HTTP backends"""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_settings_store] = lambda: settings_store
    app.dependency_overrides[get_shipment_record_store] = lambda: record_store
    app.dependency_overrides[get_carrier_factory] = lambda: carrier_factory
    app.dependency_overrides[get_shopify_client_factory] = lambda: shopify_client_factory
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_auth():
    return ("admin", "secret")


@pytest.fixture
def sample_rate_request():
    """Shopify carrier-service callback body"""
    return {
        "rate": {
            "origin": {"country": "HU", "postal_code": "1051", "city": "Budapest"},
            "destination": {"country": "HU", "postal_code": "6720", "city": "Szeged"},
            "items": [
                {"name": "Póló", "quantity": 1, "grams": 250, "price": 499000},
            ],
            "currency": "HUF",
            "locale": "hu",
        }
    }


@pytest.fixture
def sample_order():
    """orders/create webhook body for an order shipped with Kvikk"""
    return {
        "id": 5001,
        "order_number": 1001,
        "email": "vevo@example.com",
        "phone": "+36209999999",
        "currency": "HUF",
        "subtotal_price": "12000.00",
        "shipping_address": {
            "first_name": "Kiss",
            "last_name": "Anna",
            "company": None,
            "address1": "Kossuth tér 2.",
            "address2": None,
            "city": "Szeged",
            "zip": "6720",
            "country_code": "HU",
            "phone": "+36301112222",
        },
        "shipping_lines": [
            {"source": "Kvikk Shipping", "code": "kvikk_express", "title": "Kvikk Express"},
        ],
        "line_items": [
            {"title": "Póló", "quantity": 2, "grams": 250, "price": "6000.00"},
        ],
    }
