# Kvikk API client unit tests

import httpx
import pytest

from kvikk_app.core.exceptions import KvikkAPIError
from kvikk_app.services.shipping.carriers.kvikk import KvikkCarrier


"""
1. Authentication
"""

@pytest.mark.asyncio
async def test_requests_carry_api_key_header(carrier_factory, kvikk_api):
    kvikk_api.set_response("POST", "/v1/rates", json_body={"rates": []})

    await carrier_factory("merchant-key").get_rates({"packages": []})

    request = kvikk_api.calls("POST", "/v1/rates")[0]
    assert request.headers["X-API-KEY"] == "merchant-key"
    assert request.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_default_api_key_comes_from_config(kvikk_config, kvikk_api):
    kvikk_api.set_response("GET", "/v1/test", json_body={"ok": True})

    carrier = KvikkCarrier(kvikk_config, transport=kvikk_api.transport)
    await carrier.test_connection()

    assert kvikk_api.calls("GET", "/v1/test")[0].headers["X-API-KEY"] == "env-key"


"""
2. Operations
"""

@pytest.mark.asyncio
async def test_get_rates_returns_rates_list(carrier_factory, kvikk_api):
    rates = [{"service_name": "Kvikk Express", "service_code": "kvikk_express", "price": 25.0}]
    kvikk_api.set_response("POST", "/v1/rates", json_body={"rates": rates})

    result = await carrier_factory().get_rates({"packages": [{"weight": 100}]})

    assert result == rates
    assert kvikk_api.json_bodies("POST", "/v1/rates") == [{"packages": [{"weight": 100}]}]


@pytest.mark.asyncio
async def test_get_rates_without_rates_key_is_empty(carrier_factory, kvikk_api):
    kvikk_api.set_response("POST", "/v1/rates", json_body={})
    assert await carrier_factory().get_rates({}) == []


@pytest.mark.asyncio
async def test_create_shipment_returns_response(carrier_factory, kvikk_api):
    kvikk_api.set_response("POST", "/v1/shipments", status_code=201,
                           json_body={"tracking_number": "KV123", "id": "shp_1"})

    result = await carrier_factory().create_shipment({"reference": 1001})

    assert result["tracking_number"] == "KV123"


@pytest.mark.asyncio
async def test_list_shipments(carrier_factory, kvikk_api):
    kvikk_api.set_response("GET", "/v1/shipments", json_body={"shipments": [{"id": 1}, {"id": 2}]})
    assert await carrier_factory().list_shipments() == [{"id": 1}, {"id": 2}]


"""
3. Error handling
"""

@pytest.mark.asyncio
async def test_http_error_carries_status_and_body(carrier_factory, kvikk_api):
    kvikk_api.set_response("POST", "/v1/shipments", status_code=422, json_body={"error": "bad postal code"})

    with pytest.raises(KvikkAPIError) as exc_info:
        await carrier_factory().create_shipment({})

    assert exc_info.value.status_code == 422
    assert exc_info.value.status_text == "Unprocessable Entity"
    assert "bad postal code" in exc_info.value.body


@pytest.mark.asyncio
async def test_network_error_has_no_status(carrier_factory, kvikk_api):
    kvikk_api.set_error("POST", "/v1/rates", httpx.ConnectError("Connection refused"))

    with pytest.raises(KvikkAPIError) as exc_info:
        await carrier_factory().get_rates({})

    assert exc_info.value.status_code is None
    assert "Network error" in str(exc_info.value)


@pytest.mark.asyncio
async def test_timeout_is_reported(carrier_factory, kvikk_api):
    kvikk_api.set_error("POST", "/v1/rates", httpx.ReadTimeout("timed out"))

    with pytest.raises(KvikkAPIError) as exc_info:
        await carrier_factory().get_rates({})

    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_invalid_json_response(kvikk_config):
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    carrier = KvikkCarrier(kvikk_config, transport=httpx.MockTransport(handler))

    with pytest.raises(KvikkAPIError) as exc_info:
        await carrier.get_rates({})

    assert "Invalid JSON" in str(exc_info.value)


"""
4. Connection test
"""

@pytest.mark.asyncio
async def test_connection_ok(carrier_factory, kvikk_api):
    kvikk_api.set_response("GET", "/v1/test", json_body={"status": "ok"})
    assert await carrier_factory("good-key").test_connection() is True


@pytest.mark.asyncio
async def test_connection_rejected_key(carrier_factory, kvikk_api):
    kvikk_api.set_response("GET", "/v1/test", status_code=401, json_body={"error": "invalid key"})
    assert await carrier_factory("bad-key").test_connection() is False


@pytest.mark.asyncio
async def test_connection_network_error_raises(carrier_factory, kvikk_api):
    kvikk_api.set_error("GET", "/v1/test", httpx.ConnectError("unreachable"))
    with pytest.raises(KvikkAPIError):
        await carrier_factory().test_connection()
