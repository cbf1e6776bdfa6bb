# File: kvikk_app/schemas/settings.py

from typing import Optional
from pydantic import BaseModel, Field

from kvikk_app.core.enums import ServiceType
from kvikk_app.schemas.base import BaseSchema

API_KEY_MASK = "***"


class SenderProfile(BaseModel):
    name: str = ""
    address_line_1: str = ""
    city: str = ""
    postal_code: str = ""
    country_code: str = "HU"
    phone: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.name and self.address_line_1 and self.city and self.postal_code)


# Used when the merchant has not filled in the sender form yet
DEFAULT_SENDER = SenderProfile(
    name="Webshop",
    address_line_1="Fő utca 1.",
    city="Budapest",
    postal_code="1011",
    country_code="HU",
    phone="+36301234567",
)


class MerchantSettingsData(BaseSchema):
    """Full merchant record, raw API key included. Never returned over HTTP."""
    shop_domain: str
    kvikk_api_key: Optional[str] = None
    default_service: ServiceType = ServiceType.STANDARD
    auto_create_shipments: bool = True
    sender_name: Optional[str] = None
    sender_address: Optional[str] = None
    sender_city: Optional[str] = None
    sender_postal_code: Optional[str] = None
    sender_country_code: Optional[str] = None
    sender_phone: Optional[str] = None

    def sender_profile(self) -> SenderProfile:
        return SenderProfile(
            name=self.sender_name or "",
            address_line_1=self.sender_address or "",
            city=self.sender_city or "",
            postal_code=self.sender_postal_code or "",
            country_code=self.sender_country_code or "HU",
            phone=self.sender_phone or "",
        )


class MerchantSettingsRead(BaseModel):
    """Public view of the settings: the API key is reduced to a marker"""
    kvikk_api_key: str = ""
    default_service: ServiceType = ServiceType.STANDARD
    auto_create_shipments: bool = True
    sender_info: SenderProfile = Field(default_factory=SenderProfile)


class MerchantSettingsUpdate(BaseModel):
    """Submitted settings. Fields left out of the body are not changed."""
    kvikk_api_key: Optional[str] = None
    default_service: ServiceType = ServiceType.STANDARD
    auto_create_shipments: bool = True
    sender_name: Optional[str] = None
    sender_address: Optional[str] = None
    sender_city: Optional[str] = None
    sender_postal_code: Optional[str] = None
    sender_country_code: Optional[str] = None
    sender_phone: Optional[str] = None
