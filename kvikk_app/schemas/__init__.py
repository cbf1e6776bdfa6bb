from .rates import (
    RateAddress,
    RateRequest,
    RateRequestBody,
    CarrierRate,
    RateOffer,
    RateError,
    RatesResponse
)
from .settings import (
    SenderProfile,
    MerchantSettingsData,
    MerchantSettingsRead,
    MerchantSettingsUpdate
)
from .results import RateQuoteResult, ShipmentResult, WebhookResult
