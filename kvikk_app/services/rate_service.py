# kvikk_app/services/rate_service.py
"""
Checkout rate quotes.

Turns a Shopify carrier-service rate request into Kvikk's /v1/rates call and maps
the answer back into Shopify's rate format. Checkout must never be blocked, so
every failure degrades to a single static Kvikk Standard rate.
"""

import json
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from kvikk_app.core.config import KvikkConfig
from kvikk_app.core.enums import RateOutcome
from kvikk_app.core.exceptions import KvikkAPIError
from kvikk_app.schemas.rates import CarrierRate, RateOffer, RateRequest
from kvikk_app.schemas.results import RateQuoteResult
from kvikk_app.services.shipping.base import BaseCarrier
from kvikk_app.services.shipping.payload_builder import KvikkPayloadBuilder

logger = logging.getLogger(__name__)

FALLBACK_PRICE = 1500
FALLBACK_MIN_DAYS = 2
FALLBACK_MAX_DAYS = 5


def to_minor_units(price: float) -> int:
    """Round half up (not half to even), e.g. 0.125 * 100 -> 13"""
    return int(math.floor(price * 100 + 0.5))


def default_rates(config: KvikkConfig, now: Optional[datetime] = None) -> List[CarrierRate]:
    """Static rate offered when Kvikk cannot be reached"""
    now = now or datetime.now(timezone.utc)
    return [
        CarrierRate(
            service_name="Kvikk Standard",
            service_code="kvikk_standard",
            price=FALLBACK_PRICE,
            currency=config.default_currency,
            min_delivery_date=(now + timedelta(days=FALLBACK_MIN_DAYS)).isoformat(),
            max_delivery_date=(now + timedelta(days=FALLBACK_MAX_DAYS)).isoformat(),
        )
    ]


def to_rate_offer(rate: CarrierRate, default_currency: str) -> RateOffer:
    return RateOffer(
        service_name=rate.service_name,
        service_code=rate.service_code,
        total_price=to_minor_units(rate.price),
        currency=rate.currency or default_currency,
        min_delivery_date=rate.min_delivery_date,
        max_delivery_date=rate.max_delivery_date,
        phone_required=rate.phone_required or False,
        description=rate.description or "",
    )


class RateService:
    """
    Quotes Kvikk rates for Shopify checkout.

    Args:
        config: Carrier configuration
        carrier_factory: Builds a carrier client for a given API key
    """

    def __init__(self, config: KvikkConfig, carrier_factory: Callable[[Optional[str]], BaseCarrier]):
        self.config = config
        self.carrier_factory = carrier_factory
        self.payload_builder = KvikkPayloadBuilder(config)

    def _parse_rates(self, raw_rates: List[Dict[str, Any]]) -> List[CarrierRate]:
        carrier_rates = []
        for raw_rate in raw_rates:
            try:
                carrier_rates.append(CarrierRate.model_validate(raw_rate))
            except ValidationError as e:
                logger.warning(f"Skipping unusable Kvikk rate {raw_rate}: {str(e)}")
        return carrier_rates

    def _map_rates(self, carrier_rates: List[CarrierRate]) -> List[RateOffer]:
        return [to_rate_offer(rate, self.config.default_currency) for rate in carrier_rates]

    def _fallback(self, outcome: RateOutcome, error: Optional[str] = None) -> RateQuoteResult:
        carrier_rates = default_rates(self.config)
        return RateQuoteResult(
            outcome=outcome,
            rates=self._map_rates(carrier_rates),
            carrier_rates=carrier_rates,
            error=error,
        )

    async def quote(self, rate_request: RateRequest, api_key: Optional[str] = None) -> RateQuoteResult:
        """
        Get checkout rates for a rate request.

        Never raises: carrier failures give a FALLBACK result, unusable carrier
        responses an ERROR result, both carrying the static fallback rate.
        """
        logger.info(f"Shipping rate request: {json.dumps(rate_request.model_dump(), indent=2, default=str)}")

        try:
            payload = self.payload_builder.build_rate_request(rate_request)
            carrier = self.carrier_factory(api_key)
            raw_rates = await carrier.get_rates(payload)
        except KvikkAPIError as e:
            logger.error(f"Kvikk rates API error, using fallback rates: {e.body or str(e)}")
            return self._fallback(RateOutcome.FALLBACK, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while quoting Kvikk rates: {str(e)}")
            return self._fallback(RateOutcome.ERROR, str(e))

        try:
            carrier_rates = self._parse_rates(raw_rates)
            rates = self._map_rates(carrier_rates)
        except (ValidationError, TypeError, ValueError, OverflowError) as e:
            logger.error(f"Could not map Kvikk rates, using fallback rates: {str(e)}")
            return self._fallback(RateOutcome.ERROR, str(e))

        if raw_rates and not rates:
            logger.error("None of the Kvikk rates could be mapped, using fallback rates")
            return self._fallback(RateOutcome.ERROR, "Kvikk returned no usable rates")

        if not rates:
            logger.warning("Kvikk returned no rates, using fallback rates")
            return self._fallback(RateOutcome.FALLBACK, "Kvikk returned no rates")

        logger.info(f"Returned rates: {[rate.model_dump() for rate in rates]}")
        return RateQuoteResult(outcome=RateOutcome.SUCCESS, rates=rates, carrier_rates=carrier_rates)

    def quote_response(self, result: RateQuoteResult) -> Dict[str, Any]:
        """Shopify's expected body for a quote result"""
        return {"rates": [rate.model_dump() for rate in result.rates]}
