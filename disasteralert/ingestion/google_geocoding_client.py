"""
Google Geocoding API Client for DisasterAlert

Reverse geocodes coordinates into a formatted address plus typed
address components.

API Documentation: https://developers.google.com/maps/documentation/geocoding
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class AddressComponent:
    """One typed piece of a Google address (locality, postal_code, ...)."""
    long_name: str
    short_name: str = ""
    types: List[str] = field(default_factory=list)


@dataclass
class GeocodeResult:
    """First result of a reverse geocoding request."""
    formatted_address: str
    components: List[AddressComponent] = field(default_factory=list)
    place_id: Optional[str] = None

    def component(self, *types: str) -> str:
        """Long name of the first component carrying any of the given types."""
        for comp in self.components:
            if any(t in comp.types for t in types):
                return comp.long_name
        return ""


class GoogleGeocodingClient:
    """
    Client for the Google Geocoding API (reverse lookups only).

    Usage:
        client = GoogleGeocodingClient(api_key="your_key")
        result = client.reverse_geocode(12.9716, 77.5946)
    """

    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
    RESULT_TYPES = "street_address|route|premise|point_of_interest"

    def __init__(self, api_key: str, timeout: float = 30.0):
        """
        Initialize Google Geocoding client.

        Args:
            api_key: Google Maps Platform API key
            timeout: HTTP request timeout in seconds
        """
        if not api_key:
            raise ValueError("Google Maps API key is required")

        self.api_key = api_key
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        """
        Look up the address at a coordinate.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees

        Returns:
            GeocodeResult, or None when the API reports no usable result

        Raises:
            httpx.HTTPError: On transport failure or non-2xx response
        """
        params = {
            "latlng": f"{latitude},{longitude}",
            "key": self.api_key,
            "result_type": self.RESULT_TYPES,
        }

        with httpx.Client(timeout=self.timeout) as client:
            response = client.get(self.BASE_URL, params=params)
            response.raise_for_status()
            data = response.json()

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            logger.info(f"Google geocoding returned status={status} for ({latitude}, {longitude})")
            return None

        return self._parse_result(results[0])

    def _parse_result(self, result: Dict[str, Any]) -> GeocodeResult:
        """Parse one geocoding result."""
        components = [
            AddressComponent(
                long_name=comp.get("long_name", ""),
                short_name=comp.get("short_name", ""),
                types=list(comp.get("types") or []),
            )
            for comp in result.get("address_components") or []
        ]

        return GeocodeResult(
            formatted_address=result.get("formatted_address") or "",
            components=components,
            place_id=result.get("place_id"),
        )
