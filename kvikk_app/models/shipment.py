"""
Shipment records created by this app, one per (shop, order).
"""

from sqlalchemy import Column, Integer, String, Enum, JSON, Text, text, TIMESTAMP, UniqueConstraint

from kvikk_app.database import Base
from kvikk_app.core.enums import ShipmentStatus


class ShipmentRecord(Base):
    """Shipment database model"""
    __tablename__ = "kvikk_shipments"
    __table_args__ = (
        UniqueConstraint("shop_domain", "order_id", name="uq_kvikk_shipments_shop_order"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Idempotency key
    shop_domain = Column(String, nullable=False, index=True)
    order_id = Column(String, nullable=False)

    order_number = Column(String, nullable=True)
    status = Column(Enum(ShipmentStatus), default=ShipmentStatus.PENDING, nullable=False, index=True)
    service_type = Column(String, nullable=True)
    tracking_number = Column(String, nullable=True, index=True)

    carrier_response = Column(JSON, nullable=True)  # Store full API response
    last_error = Column(Text, nullable=True)

    created_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    updated_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    def __repr__(self):
        return f"<ShipmentRecord {self.id}: {self.shop_domain} #{self.order_number} - {self.tracking_number}>"
