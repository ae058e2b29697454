"""
Reverse geocoding provider chain.

Providers are tried in priority order: Gemini (semantic), Google Geocoding
(commercial), Nominatim (open data). If all of them fail, the chain ends
with an all-empty address carrying only a map link for the raw coordinates.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from disasteralert.core.config import Settings, settings as default_settings
from disasteralert.core.geo_utils import build_map_link
from disasteralert.enrichment.address import AddressBundle, GeocodeResult
from disasteralert.enrichment.chain import ProviderChain
from disasteralert.ingestion.gemini_client import GeminiClient
from disasteralert.ingestion.google_geocoding_client import GoogleGeocodingClient
from disasteralert.ingestion.nominatim_client import NominatimClient

logger = logging.getLogger(__name__)

COORDINATE_FALLBACK = "coordinates"


class LocationProvider(ABC):
    """Reverse geocoding capability."""

    name: str = "location_provider"

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[AddressBundle]:
        """Return an address bundle, or None when nothing was found."""


class GeminiLocationProvider(LocationProvider):
    """Asks a Gemini model to describe the coordinates as a structured address."""

    name = "gemini"

    PROMPT = """You are a location intelligence system. Convert the following GPS coordinates into a detailed address.

Coordinates:
- Latitude: {latitude}
- Longitude: {longitude}

Provide a JSON response with the following structure (use empty strings if information is not available):
{{
  "place_name": "Main place name or landmark",
  "full_address": "Complete formatted address",
  "nearest_landmark": "Nearest point of interest, building, or landmark",
  "area": "Area, neighborhood, or locality name",
  "city": "City name",
  "taluk": "Taluk or subdistrict name (if in India)",
  "district": "District name",
  "state": "State or province name",
  "pincode": "Postal/ZIP code",
  "country": "Country name"
}}

IMPORTANT:
- Return ONLY valid JSON, no additional text
- Use Indian administrative divisions if coordinates are in India
- Identify the nearest landmark (hospital, school, park, building, etc.)
- Be specific and accurate with location details"""

    def __init__(self, client: GeminiClient):
        self.client = client

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[AddressBundle]:
        data = self.client.generate_json(self.PROMPT.format(latitude=latitude, longitude=longitude))
        return AddressBundle.from_mapping(data)


class GoogleGeocodingProvider(LocationProvider):
    """Maps Google address component types onto the bundle schema."""

    name = "google"

    def __init__(self, client: GoogleGeocodingClient):
        self.client = client

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[AddressBundle]:
        result = self.client.reverse_geocode(latitude, longitude)
        if result is None:
            return None

        # Taluk is usually admin level 3 or a sublocality in India
        taluk = (
            result.component("administrative_area_level_3", "sublocality_level_2", "sublocality_level_1")
            or result.component("sublocality")
        )

        return AddressBundle(
            place_name=result.formatted_address
            or (result.components[0].long_name if result.components else ""),
            full_address=result.formatted_address,
            nearest_landmark=result.component("point_of_interest", "establishment", "premise"),
            area=result.component("sublocality", "sublocality_level_1", "neighborhood"),
            city=result.component("locality"),
            taluk=taluk,
            district=result.component("administrative_area_level_2"),
            state=result.component("administrative_area_level_1"),
            pincode=result.component("postal_code"),
            country=result.component("country"),
        )


class NominatimProvider(LocationProvider):
    """Maps OpenStreetMap address keys onto the bundle schema."""

    name = "nominatim"

    def __init__(self, client: NominatimClient):
        self.client = client

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[AddressBundle]:
        place = self.client.reverse(latitude, longitude)
        if place is None:
            return None

        return AddressBundle(
            place_name=place.display_name,
            full_address=place.display_name,
            nearest_landmark=place.first("amenity", "building", "leisure", "tourism"),
            area=place.first("suburb", "neighbourhood", "quarter"),
            city=place.first("city", "town", "village", "municipality"),
            taluk=place.first("county", "district"),
            district=place.first("district", "county"),
            state=place.first("state", "region"),
            pincode=place.first("postcode"),
            country=place.first("country"),
        )


def coordinate_fallback(latitude: float, longitude: float) -> GeocodeResult:
    """Terminal result: every structured field empty, only a map link."""
    return GeocodeResult(
        address=AddressBundle(map_link=build_map_link(latitude, longitude)),
        provider=COORDINATE_FALLBACK,
        latitude=latitude,
        longitude=longitude,
    )


class GeocodeProviderChain(ProviderChain[LocationProvider, AddressBundle]):
    """
    Resolves coordinates into an address bundle.

    Exactly one provider produces the structured fields of a result; the map
    link is always built from the raw coordinates. No caching.
    """

    async def resolve(self, latitude: float, longitude: float) -> GeocodeResult:
        """
        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees

        Returns:
            GeocodeResult; never raises
        """
        bundle, provider = await self.first_success(
            lambda p: p.reverse_geocode(latitude, longitude),
            accept=lambda b: isinstance(b, AddressBundle) and b.is_usable,
            label=f" for ({latitude}, {longitude})",
        )

        if bundle is None:
            logger.warning(f"All geocoding providers failed for ({latitude}, {longitude}); using raw coordinates")
            return coordinate_fallback(latitude, longitude)

        return GeocodeResult(
            address=bundle.with_map_link(build_map_link(latitude, longitude)),
            provider=provider,
            latitude=latitude,
            longitude=longitude,
        )


def build_geocode_chain(
    config: Optional[Settings] = None,
    gemini_client: Optional[GeminiClient] = None,
) -> GeocodeProviderChain:
    """
    Build the default chain from settings.

    Providers that need credentials are left out when none are configured.
    """
    config = config or default_settings
    timeout = config.provider_timeout_seconds
    providers: List[LocationProvider] = []

    if gemini_client is None and config.gemini_api_key:
        gemini_client = GeminiClient(api_key=config.gemini_api_key, timeout=timeout)
    if gemini_client is not None:
        providers.append(GeminiLocationProvider(gemini_client))

    if config.google_maps_api_key:
        providers.append(GoogleGeocodingProvider(
            GoogleGeocodingClient(config.google_maps_api_key, timeout=timeout)
        ))

    providers.append(NominatimProvider(NominatimClient(
        base_url=config.nominatim_url,
        user_agent=config.nominatim_user_agent,
        timeout=timeout,
    )))

    logger.info(f"Geocoding chain: {[p.name for p in providers]}")
    return GeocodeProviderChain(providers, timeout_seconds=timeout)
