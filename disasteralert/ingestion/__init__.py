"""
DisasterAlert - Data Ingestion Module
Clients for the external geocoding and vision services.
"""

from disasteralert.ingestion.gemini_client import (
    GeminiClient,
    strip_code_fences,
)
from disasteralert.ingestion.google_geocoding_client import (
    GoogleGeocodingClient,
    GeocodeResult,
    AddressComponent,
)
from disasteralert.ingestion.nominatim_client import (
    NominatimClient,
    NominatimPlace,
)

__all__ = [
    # Gemini
    "GeminiClient",
    "strip_code_fences",
    # Google Geocoding
    "GoogleGeocodingClient",
    "GeocodeResult",
    "AddressComponent",
    # Nominatim
    "NominatimClient",
    "NominatimPlace",
]
