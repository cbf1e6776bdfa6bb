# kvikk_app/services/shipment_records.py
"""
Local record of the shipments this app booked, keyed by (shop, order id).

Shopify redelivers webhooks it considers unacknowledged, and may deliver the same
event twice concurrently. Claiming the order before calling Kvikk keeps one order
from producing two shipments. A failed attempt releases the claim so a later
delivery can try again.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kvikk_app.core.enums import ShipmentStatus
from kvikk_app.models.shipment import ShipmentRecord

logger = logging.getLogger(__name__)


@dataclass
class ShipmentRecordData:
    shop_domain: str
    order_id: str
    status: ShipmentStatus = ShipmentStatus.PENDING
    order_number: Optional[str] = None
    service_type: Optional[str] = None
    tracking_number: Optional[str] = None
    carrier_response: Optional[Dict[str, Any]] = field(default=None, repr=False)
    last_error: Optional[str] = None


class ShipmentRecordStore(ABC):

    @abstractmethod
    async def claim(
        self,
        shop: str,
        order_id: str,
        order_number: Optional[str] = None,
        service_type: Optional[str] = None,
    ) -> bool:
        """Reserve the order for shipment creation.

        Returns:
            False if the order already has a pending or created shipment
        """
        pass

    @abstractmethod
    async def mark_created(self, shop: str, order_id: str, tracking_number: Optional[str],
                           carrier_response: Optional[Dict[str, Any]] = None) -> None:
        pass

    @abstractmethod
    async def mark_failed(self, shop: str, order_id: str, error: str) -> None:
        pass

    @abstractmethod
    async def get(self, shop: str, order_id: str) -> Optional[ShipmentRecordData]:
        pass


class InMemoryShipmentRecordStore(ShipmentRecordStore):

    def __init__(self):
        self._records: Dict[Tuple[str, str], ShipmentRecordData] = {}

    async def claim(self, shop, order_id, order_number=None, service_type=None) -> bool:
        key = (shop, str(order_id))
        existing = self._records.get(key)
        if existing and existing.status != ShipmentStatus.FAILED:
            return False
        self._records[key] = ShipmentRecordData(
            shop_domain=shop,
            order_id=str(order_id),
            order_number=order_number,
            service_type=service_type,
        )
        return True

    async def mark_created(self, shop, order_id, tracking_number, carrier_response=None) -> None:
        key = (shop, str(order_id))
        record = self._records.get(key) or ShipmentRecordData(shop_domain=shop, order_id=str(order_id))
        self._records[key] = replace(
            record,
            status=ShipmentStatus.CREATED,
            tracking_number=tracking_number,
            carrier_response=carrier_response,
            last_error=None,
        )

    async def mark_failed(self, shop, order_id, error) -> None:
        key = (shop, str(order_id))
        record = self._records.get(key) or ShipmentRecordData(shop_domain=shop, order_id=str(order_id))
        self._records[key] = replace(record, status=ShipmentStatus.FAILED, last_error=error)

    async def get(self, shop, order_id) -> Optional[ShipmentRecordData]:
        record = self._records.get((shop, str(order_id)))
        return replace(record) if record else None


class SQLAlchemyShipmentRecordStore(ShipmentRecordStore):
    """Relies on the (shop_domain, order_id) unique constraint for concurrent claims"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _get_row(self, session: AsyncSession, shop: str, order_id: str) -> Optional[ShipmentRecord]:
        result = await session.execute(
            select(ShipmentRecord).where(
                ShipmentRecord.shop_domain == shop,
                ShipmentRecord.order_id == str(order_id),
            )
        )
        return result.scalar_one_or_none()

    async def claim(self, shop, order_id, order_number=None, service_type=None) -> bool:
        async with self.session_factory() as session:
            row = await self._get_row(session, shop, order_id)
            if row is not None:
                if row.status != ShipmentStatus.FAILED:
                    return False
                row.status = ShipmentStatus.PENDING
                row.order_number = order_number
                row.service_type = service_type
                row.last_error = None
                await session.commit()
                return True

            session.add(ShipmentRecord(
                shop_domain=shop,
                order_id=str(order_id),
                order_number=order_number,
                service_type=service_type,
                status=ShipmentStatus.PENDING,
            ))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(f"Order {order_id} for {shop} was claimed by a concurrent delivery")
                return False
            return True

    async def mark_created(self, shop, order_id, tracking_number, carrier_response=None) -> None:
        async with self.session_factory() as session:
            row = await self._get_row(session, shop, order_id)
            if row is None:
                row = ShipmentRecord(shop_domain=shop, order_id=str(order_id))
                session.add(row)
            row.status = ShipmentStatus.CREATED
            row.tracking_number = tracking_number
            row.carrier_response = carrier_response
            row.last_error = None
            await session.commit()

    async def mark_failed(self, shop, order_id, error) -> None:
        async with self.session_factory() as session:
            row = await self._get_row(session, shop, order_id)
            if row is None:
                row = ShipmentRecord(shop_domain=shop, order_id=str(order_id))
                session.add(row)
            row.status = ShipmentStatus.FAILED
            row.last_error = error
            await session.commit()

    async def get(self, shop, order_id) -> Optional[ShipmentRecordData]:
        async with self.session_factory() as session:
            row = await self._get_row(session, shop, order_id)
        if row is None:
            return None
        return ShipmentRecordData(
            shop_domain=row.shop_domain,
            order_id=row.order_id,
            status=row.status,
            order_number=row.order_number,
            service_type=row.service_type,
            tracking_number=row.tracking_number,
            carrier_response=row.carrier_response,
            last_error=row.last_error,
        )
