"""
Per-shop merchant configuration.
"""

from sqlalchemy import Column, Integer, String, Boolean, text, TIMESTAMP

from kvikk_app.database import Base


class MerchantSettings(Base):
    """One row per installed shop, keyed by shop domain"""
    __tablename__ = "merchant_settings"

    id = Column(Integer, primary_key=True)
    shop_domain = Column(String, nullable=False, unique=True, index=True)

    kvikk_api_key = Column(String, nullable=True)
    default_service = Column(String, nullable=False, default="standard")
    auto_create_shipments = Column(Boolean, nullable=False, default=True)

    # Sender profile
    sender_name = Column(String, nullable=True)
    sender_address = Column(String, nullable=True)
    sender_city = Column(String, nullable=True)
    sender_postal_code = Column(String, nullable=True)
    sender_country_code = Column(String, nullable=True)
    sender_phone = Column(String, nullable=True)

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
        return f"<MerchantSettings {self.id}: {self.shop_domain}>"
