# Merchant admin page tests
from datetime import date

import httpx

from kvikk_app.routes.admin import status_badge, summarize_shipments

SHOP = "test-shop.myshopify.com"


def test_summarize_shipments_counts_today():
    shipments = [{"id": i, "created_at": "2026-10-17T08:00:00Z"} for i in range(3)]
    shipments += [{"id": 10 + i, "created_at": "2026-10-16T08:00:00+00:00"} for i in range(10)]
    shipments.append({"id": 99})

    summary = summarize_shipments(shipments, today=date(2026, 10, 17))

    assert summary["today"] == 3
    assert len(summary["recent"]) == 10
    assert summary["recent"][0]["id"] == 0


def test_status_badge():
    assert status_badge("DELIVERED") == "success"
    assert status_badge("failed") == "critical"
    assert status_badge(None) == "info"


def test_admin_requires_auth(test_client):
    assert test_client.get("/app").status_code == 401


def test_admin_page_renders(test_client, admin_auth, kvikk_api):
    kvikk_api.set_response("GET", "/v1/shipments", json_body={"shipments": [
        {"order_number": "1001", "recipient_name": "Kiss Anna", "service_type": "express",
         "status": "in_transit", "tracking_number": "KV123", "created_at": "2020-01-01T10:00:00Z"},
    ]})

    response = test_client.get("/app", params={"shop": SHOP}, auth=admin_auth)

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Kvikk Shipping Integration" in response.text
    assert "KV123" in response.text
    assert 'badge-info">in_transit' in response.text
    assert 'value="***"' in response.text


def test_admin_page_survives_kvikk_outage(test_client, admin_auth, kvikk_api):
    kvikk_api.set_error("GET", "/v1/shipments", httpx.ConnectError("refused"))

    response = test_client.get("/app", params={"shop": SHOP}, auth=admin_auth)

    assert response.status_code == 200
    assert "No shipments yet" in response.text


def test_save_settings_form(test_client, admin_auth, kvikk_api):
    kvikk_api.set_response("GET", "/v1/shipments", json_body={"shipments": []})

    response = test_client.post("/app", params={"shop": SHOP}, auth=admin_auth, data={
        "_action": "save_settings",
        "kvikk_api_key": "merchant-key",
        "default_service": "express",
        "sender_name": "Teszt Bolt",
        "sender_address": "Váci út 1.",
        "sender_city": "Budapest",
        "sender_postal_code": "1132",
        "sender_phone": "+3611234567",
    })

    assert response.status_code == 200
    assert "Settings saved" in response.text

    settings = test_client.get("/api/settings", params={"shop": SHOP}, auth=admin_auth).json()
    # unchecked checkbox is not submitted
    assert settings["auto_create_shipments"] is False
    assert settings["default_service"] == "express"
    assert settings["sender_info"]["city"] == "Budapest"


def test_save_settings_form_checkbox_on(test_client, admin_auth, kvikk_api):
    test_client.post("/app", params={"shop": SHOP}, auth=admin_auth, data={
        "_action": "save_settings",
        "auto_create_shipments": "on",
    })

    settings = test_client.get("/api/settings", params={"shop": SHOP}, auth=admin_auth).json()
    assert settings["auto_create_shipments"] is True


def test_test_connection_success(test_client, admin_auth, kvikk_api):
    kvikk_api.set_response("GET", "/v1/test", json_body={"status": "ok"})

    response = test_client.post("/app", params={"shop": SHOP}, auth=admin_auth,
                                data={"_action": "test_connection", "kvikk_api_key": "new-key"})

    assert response.json() == {"testResult": {"success": True, "message": "Connection successful"}}
    assert kvikk_api.calls("GET", "/v1/test")[0].headers["X-API-KEY"] == "new-key"


def test_test_connection_masked_key_uses_stored_key(test_client, admin_auth, kvikk_api):
    kvikk_api.set_response("GET", "/v1/test", status_code=401, json_body={"error": "invalid"})

    response = test_client.post("/app", params={"shop": SHOP}, auth=admin_auth,
                                data={"_action": "test_connection", "kvikk_api_key": "***"})

    assert response.json()["testResult"] == {"success": False, "message": "Invalid API key"}
    assert kvikk_api.calls("GET", "/v1/test")[0].headers["X-API-KEY"] == "env-key"


def test_test_connection_network_error(test_client, admin_auth, kvikk_api):
    kvikk_api.set_error("GET", "/v1/test", httpx.ConnectError("refused"))

    response = test_client.post("/app", params={"shop": SHOP}, auth=admin_auth,
                                data={"_action": "test_connection", "kvikk_api_key": "k"})

    result = response.json()["testResult"]
    assert result["success"] is False
    assert result["message"].startswith("Connection error")


def test_unknown_action(test_client, admin_auth):
    response = test_client.post("/app", auth=admin_auth, data={"_action": "delete_everything"})
    assert response.status_code == 400
