# Shipment record store tests
import pytest

from kvikk_app.core.enums import ShipmentStatus
from kvikk_app.models.shipment import ShipmentRecord
from kvikk_app.services.shipment_records import InMemoryShipmentRecordStore, SQLAlchemyShipmentRecordStore

SHOP = "test-shop.myshopify.com"


@pytest.fixture(params=["memory", "sqlalchemy"])
async def store(request, session_factory):
    if request.param == "memory":
        return InMemoryShipmentRecordStore()
    return SQLAlchemyShipmentRecordStore(session_factory)


@pytest.mark.asyncio
async def test_first_claim_wins(store):
    assert await store.claim(SHOP, "5001", "1001", "express") is True
    assert await store.claim(SHOP, "5001", "1001", "express") is False

    record = await store.get(SHOP, "5001")
    assert record.status == ShipmentStatus.PENDING
    assert record.order_number == "1001"
    assert record.service_type == "express"


@pytest.mark.asyncio
async def test_claims_are_per_shop(store):
    assert await store.claim(SHOP, "5001") is True
    assert await store.claim("other-shop.myshopify.com", "5001") is True


@pytest.mark.asyncio
async def test_created_record_blocks_claims(store):
    await store.claim(SHOP, "5001")
    await store.mark_created(SHOP, "5001", "KV123", {"tracking_number": "KV123"})

    assert await store.claim(SHOP, "5001") is False
    record = await store.get(SHOP, "5001")
    assert record.status == ShipmentStatus.CREATED
    assert record.tracking_number == "KV123"
    assert record.carrier_response == {"tracking_number": "KV123"}


@pytest.mark.asyncio
async def test_failed_record_can_be_reclaimed(store):
    await store.claim(SHOP, "5001")
    await store.mark_failed(SHOP, "5001", "Kvikk API error: Bad Request")

    failed = await store.get(SHOP, "5001")
    assert failed.status == ShipmentStatus.FAILED
    assert failed.last_error == "Kvikk API error: Bad Request"

    assert await store.claim(SHOP, "5001") is True
    reclaimed = await store.get(SHOP, "5001")
    assert reclaimed.status == ShipmentStatus.PENDING
    assert reclaimed.last_error is None


@pytest.mark.asyncio
async def test_unknown_record(store):
    assert await store.get(SHOP, "missing") is None


@pytest.mark.asyncio
async def test_concurrent_insert_loses_on_unique_constraint(session_factory):
    # Row inserted by another worker after this worker's lookup
    store = SQLAlchemyShipmentRecordStore(session_factory)
    original_get_row = store._get_row

    async def racing_get_row(session, shop, order_id):
        row = await original_get_row(session, shop, order_id)
        async with session_factory() as other:
            other.add(ShipmentRecord(shop_domain=shop, order_id=str(order_id), status=ShipmentStatus.PENDING))
            await other.commit()
        return row

    store._get_row = racing_get_row

    assert await store.claim(SHOP, "5001") is False
