"""
SQLAlchemy models for DisasterAlert
Incidents carry every enrichment column from the first schema version.
"""

from typing import Any, Dict, Optional

from sqlalchemy import (
    Column, Integer, Float, String, Text,
    DateTime, Index
)
from sqlalchemy.orm import declarative_base

from disasteralert.core.constants import IncidentStatus, ANONYMOUS_USER
from disasteralert.core.geo_utils import build_map_link
from disasteralert.core.time_utils import format_display_datetime, utcnow

Base = declarative_base()

# Columns populated as a unit by exactly one geocoding provider
ADDRESS_FIELDS = (
    "place_name",
    "full_address",
    "nearest_landmark",
    "area",
    "city",
    "taluk",
    "district",
    "state",
    "pincode",
    "country",
    "map_link",
)


class Incident(Base):
    """
    Emergency report submitted by a citizen.

    Written once by the enrichment pipeline; afterwards only status,
    department and updated_at change.
    """
    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, index=True)

    # Report content
    title = Column(Text, nullable=False)
    description = Column(Text, default="")
    category = Column(String(32), nullable=False)
    image_url = Column(String(500), nullable=False)

    # Location as typed by the reporter
    location = Column(Text, default="")

    # Resolved coordinates (both or neither)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Resolved address bundle
    place_name = Column(Text)
    full_address = Column(Text)
    nearest_landmark = Column(Text)
    area = Column(Text)
    city = Column(Text)
    taluk = Column(Text)
    district = Column(Text)
    state = Column(Text)
    pincode = Column(String(20))
    country = Column(Text)
    map_link = Column(String(500))

    # Machine-generated scene description
    photo_description = Column(Text, nullable=False)

    # Handling
    status = Column(String(20), nullable=False, default=IncidentStatus.REPORTED.value)
    department = Column(String(100), nullable=True)
    user_id = Column(String(100), nullable=False, default=ANONYMOUS_USER)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_incident_status", status),
        Index("idx_incident_category", category),
        Index("idx_incident_user", user_id),
        Index("idx_incident_created_at", created_at),
        Index("idx_incident_state_taluk", state, taluk),
    )

    def __repr__(self):
        return f"<Incident({self.id}, category={self.category}, status={self.status})>"

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def reported_datetime(self) -> str:
        return format_display_datetime(self.created_at)

    def resolved_map_link(self) -> str:
        """Stored map link, or one built from the coordinates."""
        if self.map_link:
            return self.map_link
        if self.has_coordinates:
            return build_map_link(self.latitude, self.longitude)
        return ""

    def location_details(self) -> Dict[str, str]:
        """Address bundle with empty strings for unknown fields."""
        return {
            "place_name": self.place_name or "",
            "full_address": self.full_address or self.location or "",
            "nearest_landmark": self.nearest_landmark or "",
            "area": self.area or "",
            "city": self.city or "",
            "taluk": self.taluk or "",
            "district": self.district or "",
            "state": self.state or "",
            "pincode": self.pincode or "",
            "country": self.country or "",
            "map_link": self.resolved_map_link(),
        }

    def to_dict(self, distance: Optional[float] = None) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description or "",
            "category": self.category,
            "location": self.location or "",
            "latitude": self.latitude,
            "longitude": self.longitude,
            "image_url": self.image_url,
            "photo_description": self.photo_description,
            "status": self.status,
            "department": self.department,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "reported_datetime": self.reported_datetime,
        }
        for name in ADDRESS_FIELDS:
            data[name] = getattr(self, name)
        if distance is not None:
            data["distance"] = distance
        return data


class Department(Base):
    """
    Responder department an admin can assign.

    Incident department labels are free-form and not checked against this table.
    """
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Department({self.id}, name={self.name})>"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
