"""
Base Carrier Interface

This module defines the abstract base class that shipping carrier
implementations must implement: quoting rates, creating shipments,
listing recent shipments and checking credentials.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List


class BaseCarrier(ABC):
    """Base class for all shipping carriers"""

    @abstractmethod
    async def get_rates(self, rate_request: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Get shipping rates

        Args:
            rate_request: Rate request payload in the carrier's format

        Returns:
            Raw carrier rates
        """
        pass

    @abstractmethod
    async def create_shipment(self, shipment_details: Dict[str, Any]) -> Dict[str, Any]:
        """Create a shipment

        Args:
            shipment_details: Shipment payload in the carrier's format

        Returns:
            API response, including the tracking number
        """
        pass

    @abstractmethod
    async def list_shipments(self) -> List[Dict[str, Any]]:
        """List shipments known to the carrier account"""
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Check that the configured credentials are accepted"""
        pass
