# File: kvikk_app/schemas/rates.py

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from kvikk_app.schemas.base import PayloadSchema


class RateAddress(PayloadSchema):
    """Origin/destination as sent by Shopify's carrier-service callback"""
    postal_code: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    province: Optional[str] = None
    city: Optional[str] = None

    @property
    def resolved_country(self) -> Optional[str]:
        return self.country or self.country_code


class RateRequest(PayloadSchema):
    origin: RateAddress = Field(default_factory=RateAddress)
    destination: RateAddress = Field(default_factory=RateAddress)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    currency: Optional[str] = None
    locale: Optional[str] = None


class RateRequestBody(PayloadSchema):
    rate: RateRequest


class CarrierRate(BaseModel):
    """A single rate as returned by Kvikk's /v1/rates"""
    service_name: str
    service_code: str
    price: float
    currency: Optional[str] = None
    min_delivery_date: Optional[str] = None
    max_delivery_date: Optional[str] = None
    phone_required: Optional[bool] = None
    description: Optional[str] = None


class RateOffer(BaseModel):
    """A rate in the shape Shopify's checkout expects"""
    service_name: str
    service_code: str
    total_price: int  # minor currency units
    currency: str
    min_delivery_date: Optional[str] = None
    max_delivery_date: Optional[str] = None
    phone_required: bool = False
    description: str = ""


class RateError(BaseModel):
    message: str


class RatesResponse(BaseModel):
    rates: List[RateOffer] = Field(default_factory=list)
    errors: Optional[List[RateError]] = None
