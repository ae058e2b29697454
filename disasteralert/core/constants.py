"""
DisasterAlert - Constants and Reference Data
Static values used throughout the application.
"""

from enum import Enum
from typing import Dict, List, Tuple


# =============================================================================
# INCIDENT ENUMERATIONS
# =============================================================================

class IncidentCategory(str, Enum):
    """Kinds of emergency a citizen can report."""
    FIRE = "Fire"
    FLOOD = "Flood"
    ACCIDENT = "Accident"
    ELECTRICITY = "Electricity"


class IncidentStatus(str, Enum):
    """Handling state of an incident, written by admins."""
    REPORTED = "Reported"
    VERIFIED = "Verified"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


CATEGORY_VALUES: Tuple[str, ...] = tuple(c.value for c in IncidentCategory)
STATUS_VALUES: Tuple[str, ...] = tuple(s.value for s in IncidentStatus)

# Pseudo-category used by list filters to mean "no filter"
ALL_CATEGORIES = "All"

ANONYMOUS_USER = "anonymous"


class UserRole(str, Enum):
    """Roles carried by an authenticated caller."""
    USER = "user"
    ADMIN = "admin"


# =============================================================================
# DEPARTMENTS
# =============================================================================

DEFAULT_DEPARTMENTS: List[str] = [
    "Police",
    "Fire",
    "Disaster Management",
    "Electricity",
]


# =============================================================================
# GEODESY
# =============================================================================

# Mean Earth radius in meters. The client "how far away" display uses the
# same constant.
EARTH_RADIUS_M = 6371000.0

DEFAULT_NEARBY_RADIUS_M = 5000.0
NEARBY_RESULT_LIMIT = 10

GOOGLE_MAPS_BASE_URL = "https://www.google.com/maps"


# =============================================================================
# PHOTO DESCRIPTION TEMPLATES
# =============================================================================

CATEGORY_DESCRIPTION_TEMPLATES: Dict[str, str] = {
    IncidentCategory.FIRE.value: (
        "Fire incident detected. Visible flames, smoke, or fire-related damage observed."
    ),
    IncidentCategory.FLOOD.value: (
        "Flooding situation visible. Water accumulation, submerged areas, or water damage present."
    ),
    IncidentCategory.ACCIDENT.value: (
        "Traffic or vehicular accident scene. Vehicles involved, debris, or emergency response visible."
    ),
    IncidentCategory.ELECTRICITY.value: (
        "Electrical issue detected. Power lines, electrical equipment, or power-related problem visible."
    ),
}

GENERIC_DESCRIPTION_TEMPLATE = "Emergency incident reported. Visual evidence captured."

# Max characters of the reporter's text appended to a template description
DESCRIPTION_EXCERPT_LENGTH = 100


# =============================================================================
# IMAGE TYPES
# =============================================================================

IMAGE_MIME_TYPES: Dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"
