"""
DisasterAlert - Geospatial Utilities
Distance calculations, coordinate validation and map links.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import quote

from disasteralert.core.constants import EARTH_RADIUS_M, GOOGLE_MAPS_BASE_URL


@dataclass(frozen=True)
class Coordinates:
    """Geographic point with latitude and longitude in decimal degrees."""
    latitude: float
    longitude: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """Check that a latitude/longitude pair is finite and within range."""
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


def parse_coordinate_pair(
    latitude: object,
    longitude: object
) -> Optional[Coordinates]:
    """
    Build Coordinates from two loosely typed values (numbers or strings).

    Returns None when either value is missing, blank, unparseable or
    out of range.
    """
    if latitude is None or longitude is None:
        return None
    if isinstance(latitude, str) and not latitude.strip():
        return None
    if isinstance(longitude, str) and not longitude.strip():
        return None

    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return None

    if not is_valid_coordinate(lat, lon):
        return None
    return Coordinates(latitude=lat, longitude=lon)


def spherical_distance_m(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Great-circle distance using the spherical law of cosines.

    Args:
        lat1, lon1: First point coordinates in decimal degrees
        lat2, lon2: Second point coordinates in decimal degrees

    Returns:
        Distance in meters
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lon = math.radians(lon2 - lon1)

    cos_angle = (
        math.sin(lat1_rad) * math.sin(lat2_rad) +
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon)
    )
    # Rounding can push the cosine just outside [-1, 1]
    cos_angle = max(-1.0, min(1.0, cos_angle))

    return EARTH_RADIUS_M * math.acos(cos_angle)


def haversine_distance_m(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Haversine great-circle distance, the formula the web client uses for
    the distance it shows next to each report.

    Same earth radius as spherical_distance_m, so both agree to within
    floating point noise.

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def build_map_link(latitude: float, longitude: float) -> str:
    """Google Maps link pinned at the given coordinates."""
    return f"{GOOGLE_MAPS_BASE_URL}?q={latitude},{longitude}"


def build_search_link(location: Optional[str]) -> str:
    """Google Maps search link for a free-text location."""
    return f"{GOOGLE_MAPS_BASE_URL}/search/{quote(location or '', safe='')}"
