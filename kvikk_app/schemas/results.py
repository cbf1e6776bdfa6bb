"""
Typed outcomes of the customer-facing paths, so callers can tell a real quote
from a fallback and a created shipment from a skipped one.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from kvikk_app.core.enums import RateOutcome, ShipmentOutcome
from kvikk_app.schemas.rates import CarrierRate, RateOffer


class RateQuoteResult(BaseModel):
    outcome: RateOutcome
    rates: List[RateOffer] = Field(default_factory=list)
    carrier_rates: List[CarrierRate] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.outcome != RateOutcome.SUCCESS


class ShipmentResult(BaseModel):
    outcome: ShipmentOutcome
    order_id: Optional[str] = None
    tracking_number: Optional[str] = None
    service_type: Optional[str] = None
    error: Optional[str] = None


class WebhookResult(BaseModel):
    topic: str
    shop: Optional[str] = None
    webhook_id: Optional[str] = None
    handled: bool = False
    shipment: Optional[ShipmentResult] = None
    error: Optional[str] = None
