# Kvikk payload builder tests
import logging

import pytest

from kvikk_app.core.enums import ServiceType
from kvikk_app.schemas.rates import RateRequest
from kvikk_app.schemas.settings import SenderProfile
from kvikk_app.services.shipping.payload_builder import (
    REQUESTED_SERVICE_TYPES,
    KvikkPayloadBuilder,
    resolve_service_type,
)


@pytest.fixture
def builder(kvikk_config):
    return KvikkPayloadBuilder(kvikk_config)


@pytest.fixture
def sender():
    return SenderProfile(
        name="Teszt Bolt",
        address_line_1="Váci út 1.",
        city="Budapest",
        postal_code="1132",
        country_code="HU",
        phone="+3611234567",
    )


"""
1. Service type resolution
"""

@pytest.mark.parametrize("code, expected", [
    ("express_kvikk", ServiceType.EXPRESS),
    ("KVIKK_EXPRESS", ServiceType.EXPRESS),
    ("kvikk_economy", ServiceType.ECONOMY),
    ("kvikk_standard", ServiceType.STANDARD),
    ("something_else", ServiceType.STANDARD),
])
def test_resolve_service_type_from_code(code, expected):
    assert resolve_service_type({"code": code}) == expected


def test_resolve_service_type_uses_service_code_when_code_missing():
    assert resolve_service_type({"service_code": "kvikk_economy"}) == ServiceType.ECONOMY


def test_resolve_service_type_without_line_is_standard():
    assert resolve_service_type(None) == ServiceType.STANDARD
    assert resolve_service_type({}) == ServiceType.STANDARD


def test_resolve_service_type_ambiguous_code_prefers_express(caplog):
    with caplog.at_level(logging.WARNING):
        assert resolve_service_type({"code": "economy_express"}) == ServiceType.EXPRESS
    assert "matches several services" in caplog.text


"""
2. Rate request payload
"""

def test_rate_payload_structure(builder):
    request = RateRequest.model_validate({
        "origin": {"country": "HU", "postal_code": "1051", "city": "Budapest"},
        "destination": {"country": "HU", "postal_code": "6720", "city": "Szeged"},
        "items": [{"name": "Póló", "quantity": 2, "grams": 250, "price": 3000}],
    })

    payload = builder.build_rate_request(request)

    assert payload["origin"] == {"postal_code": "1051", "country_code": "HU", "city": "Budapest"}
    assert payload["destination"] == {"postal_code": "6720", "country_code": "HU", "city": "Szeged"}
    assert payload["service_types"] == REQUESTED_SERVICE_TYPES
    package = payload["packages"][0]
    assert package["weight"] == 500
    assert package["value"] == 6000
    assert package["contents"] == "Póló"
    assert set(package["dimensions"]) == {"length", "width", "height"}


def test_rate_payload_origin_defaults(builder):
    request = RateRequest.model_validate({
        "origin": {},
        "destination": {"country_code": "AT", "postal_code": "1010"},
        "items": [],
    })

    payload = builder.build_rate_request(request)

    assert payload["origin"]["postal_code"] == "1011"
    assert payload["origin"]["country_code"] == "HU"
    # destination country_code is used when country is absent
    assert payload["destination"]["country_code"] == "AT"
    assert payload["packages"][0]["weight"] == 0


"""
3. Shipment payload
"""

def test_shipment_payload_structure(builder, sample_order, sender):
    payload = builder.build_shipment(sample_order, sender, ServiceType.EXPRESS)

    assert payload["reference"] == 1001
    assert payload["service_type"] == "express"
    assert payload["sender"]["name"] == "Teszt Bolt"
    assert payload["recipient"] == {
        "name": "Kiss Anna",
        "company": "",
        "address_line_1": "Kossuth tér 2.",
        "address_line_2": "",
        "city": "Szeged",
        "postal_code": "6720",
        "country_code": "HU",
        "phone": "+36301112222",
        "email": "vevo@example.com",
    }
    package = payload["packages"][0]
    assert package["weight"] == 500
    assert package["value"] == 12000.0
    assert package["currency"] == "HUF"
    assert package["contents"] == "Póló x2"


def test_recipient_phone_falls_back_to_order_phone(builder, sample_order, sender):
    sample_order["shipping_address"]["phone"] = None
    payload = builder.build_shipment(sample_order, sender, ServiceType.STANDARD)
    assert payload["recipient"]["phone"] == "+36209999999"

    sample_order["phone"] = None
    payload = builder.build_shipment(sample_order, sender, ServiceType.STANDARD)
    assert payload["recipient"]["phone"] == ""


def test_recipient_name_is_trimmed(builder, sample_order, sender):
    sample_order["shipping_address"]["first_name"] = None
    payload = builder.build_shipment(sample_order, sender, ServiceType.STANDARD)
    assert payload["recipient"]["name"] == "Anna"


@pytest.mark.parametrize("subtotal, insurance, signature", [
    ("12000.00", False, False),
    ("50000.00", False, False),
    ("60000.00", True, False),
    ("100000.00", True, False),
    ("150000.00", True, True),
    (None, False, False),
])
def test_insurance_and_signature_thresholds(builder, sample_order, sender, subtotal, insurance, signature):
    sample_order["subtotal_price"] = subtotal
    payload = builder.build_shipment(sample_order, sender, ServiceType.STANDARD)
    assert payload["insurance"] is insurance
    assert payload["signature_required"] is signature
