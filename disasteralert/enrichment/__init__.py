"""
DisasterAlert - Enrichment Module
Coordinate resolution, reverse geocoding and photo description for new reports.
"""

from disasteralert.enrichment.address import AddressBundle, GeocodeResult
from disasteralert.enrichment.coordinate_resolver import (
    CoordinateResolver,
    CoordinateResolution,
    CoordinateSource,
)
from disasteralert.enrichment.geocode_chain import (
    LocationProvider,
    GeocodeProviderChain,
    build_geocode_chain,
)
from disasteralert.enrichment.photo_description import (
    DescriptionProvider,
    PhotoDescriptionProviderChain,
    build_description_chain,
    template_description,
)

__all__ = [
    # Address
    "AddressBundle",
    "GeocodeResult",
    # Coordinates
    "CoordinateResolver",
    "CoordinateResolution",
    "CoordinateSource",
    # Geocoding
    "LocationProvider",
    "GeocodeProviderChain",
    "build_geocode_chain",
    # Photo description
    "DescriptionProvider",
    "PhotoDescriptionProviderChain",
    "build_description_chain",
    "template_description",
]
