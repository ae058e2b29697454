"""
DisasterAlert - OpenStreetMap Nominatim Client
Reverse geocoding against the public (or a self-hosted) Nominatim service.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from disasteralert.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class NominatimPlace:
    """A reverse geocoding hit from Nominatim."""
    display_name: str
    address: Dict[str, str] = field(default_factory=dict)
    osm_id: Optional[int] = None
    osm_type: Optional[str] = None

    def first(self, *keys: str) -> str:
        """First non-empty address value among the given OSM keys."""
        for key in keys:
            value = self.address.get(key)
            if value:
                return value
        return ""


class NominatimClient:
    """
    Client for OpenStreetMap Nominatim reverse geocoding.

    Nominatim's usage policy requires an identifying User-Agent.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: float = 30.0
    ):
        """
        Initialize the Nominatim client.

        Args:
            base_url: Nominatim root URL
            user_agent: User-Agent header sent with every request
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or settings.nominatim_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout

    def reverse(self, latitude: float, longitude: float, zoom: int = 18) -> Optional[NominatimPlace]:
        """
        Reverse geocode a coordinate.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            zoom: Level of detail (18 = building)

        Returns:
            NominatimPlace, or None when Nominatim has nothing at this point
        """
        params = {
            "lat": latitude,
            "lon": longitude,
            "format": "json",
            "addressdetails": 1,
            "zoom": zoom,
        }

        with httpx.Client(timeout=self.timeout, headers={"User-Agent": self.user_agent}) as client:
            response = client.get(f"{self.base_url}/reverse", params=params)
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict) or data.get("error"):
            logger.info(f"Nominatim found nothing at ({latitude}, {longitude})")
            return None

        return self._parse_place(data)

    def _parse_place(self, data: Dict[str, Any]) -> NominatimPlace:
        address = data.get("address") or {}
        return NominatimPlace(
            display_name=data.get("display_name") or "",
            address={k: str(v) for k, v in address.items() if v is not None},
            osm_id=data.get("osm_id"),
            osm_type=data.get("osm_type"),
        )
