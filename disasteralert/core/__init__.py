"""
DisasterAlert - Core Utilities
Central configuration, logging, and utility functions.
"""

from disasteralert.core.config import settings
from disasteralert.core.constants import (
    IncidentCategory,
    IncidentStatus,
    UserRole,
    EARTH_RADIUS_M,
)
from disasteralert.core.geo_utils import (
    Coordinates,
    spherical_distance_m,
    haversine_distance_m,
    build_map_link,
    build_search_link,
)
from disasteralert.core.time_utils import format_display_datetime

__all__ = [
    "settings",
    "IncidentCategory",
    "IncidentStatus",
    "UserRole",
    "EARTH_RADIUS_M",
    "Coordinates",
    "spherical_distance_m",
    "haversine_distance_m",
    "build_map_link",
    "build_search_link",
    "format_display_datetime",
]
