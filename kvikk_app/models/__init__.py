from .merchant_settings import MerchantSettings
from .shipment import ShipmentRecord
