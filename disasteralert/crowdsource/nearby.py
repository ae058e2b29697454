"""
Nearby incident query used for proximity alerts.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select

from disasteralert.core.constants import (
    DEFAULT_NEARBY_RADIUS_M,
    NEARBY_RESULT_LIMIT,
    IncidentStatus,
)
from disasteralert.core.geo_utils import is_valid_coordinate, spherical_distance_m
from disasteralert.database.connection import DatabaseConnection
from disasteralert.database.models import Incident

logger = logging.getLogger(__name__)


@dataclass
class NearbyIncident:
    """An open incident and its distance from the query point."""
    incident: Incident
    distance_m: float

    def to_dict(self) -> dict:
        return self.incident.to_dict(distance=self.distance_m)


class NearbyQueryEngine:
    """
    Ranks open incidents by great-circle distance from a point.

    Open means status other than Resolved. Only incidents with coordinates
    take part. Distances use the spherical law of cosines and are rounded
    to the millimetre before the radius comparison.
    """

    def __init__(self, db: DatabaseConnection, limit: int = NEARBY_RESULT_LIMIT):
        self.db = db
        self.limit = limit

    def find_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_m: Optional[float] = None,
    ) -> List[NearbyIncident]:
        """
        Find open incidents strictly within a radius.

        Args:
            latitude: Center latitude
            longitude: Center longitude
            radius_m: Radius in meters (default 5000)

        Returns:
            Up to `limit` incidents ordered by ascending distance
        """
        radius = DEFAULT_NEARBY_RADIUS_M if radius_m is None else float(radius_m)
        if not is_valid_coordinate(latitude, longitude):
            raise ValueError(f"Invalid center coordinate ({latitude}, {longitude})")
        if radius <= 0:
            raise ValueError("Radius must be positive")

        query = select(Incident).where(
            Incident.latitude.is_not(None),
            Incident.longitude.is_not(None),
            Incident.status != IncidentStatus.RESOLVED.value,
        )

        with self.db.get_session() as session:
            candidates = session.scalars(query).all()

        hits = []
        for incident in candidates:
            distance = round(
                spherical_distance_m(latitude, longitude, incident.latitude, incident.longitude),
                3,
            )
            if distance < radius:
                hits.append(NearbyIncident(incident=incident, distance_m=distance))

        hits.sort(key=lambda h: h.distance_m)
        logger.debug(f"Nearby ({latitude}, {longitude}) r={radius}m: {len(hits)} of {len(candidates)} open incidents")

        return hits[:self.limit]
