"""
Incident report handler for crowdsourced data
Stores enriched incidents and serves the read-side queries
"""

import logging
from typing import Optional, List, Dict, Any

from sqlalchemy import func, select

from disasteralert.core.constants import (
    ALL_CATEGORIES,
    ANONYMOUS_USER,
    IncidentStatus,
)
from disasteralert.core.time_utils import utcnow
from disasteralert.database.connection import DatabaseConnection
from disasteralert.database.models import Department, Incident
from disasteralert.enrichment.address import AddressBundle

logger = logging.getLogger(__name__)


class IncidentHandler:
    """
    Handles incident reports from citizens.

    Incidents are inserted once, fully enriched; this class never writes
    partial records.
    """

    def __init__(self, db: DatabaseConnection):
        """
        Initialize incident handler.

        Args:
            db: Database connection used for every read and write
        """
        self.db = db
        logger.info("IncidentHandler initialized")

    def create_incident(
        self,
        title: str,
        category: str,
        image_url: str,
        photo_description: str,
        address: AddressBundle,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Incident:
        """
        Insert a new incident in a single transaction.

        Args:
            title: Report title
            category: Incident category
            image_url: Stored photo reference
            photo_description: Generated scene description
            address: Resolved address bundle
            latitude: Resolved latitude (None when unresolved)
            longitude: Resolved longitude (None when unresolved)
            description: Reporter's free text
            location: Reporter's free-text location
            user_id: Reporter id

        Returns:
            Created Incident with its id assigned
        """
        if not image_url:
            raise ValueError("Incident cannot be stored without a photo reference")
        if (latitude is None) != (longitude is None):
            raise ValueError("Latitude and longitude must be set together")

        now = utcnow()
        incident = Incident(
            title=title,
            description=description or "",
            category=category,
            location=location or address.full_address,
            latitude=latitude,
            longitude=longitude,
            image_url=image_url,
            user_id=user_id or ANONYMOUS_USER,
            status=IncidentStatus.REPORTED.value,
            photo_description=photo_description,
            created_at=now,
            updated_at=now,
            **address.to_dict(),
        )

        with self.db.get_session() as session:
            session.add(incident)
            session.flush()
            incident_id = incident.id

        logger.info(f"New incident created: {incident_id} ({category}) at ({latitude}, {longitude})")
        return incident

    def get_incident(self, incident_id: int) -> Optional[Incident]:
        """Get incident by ID."""
        with self.db.get_session() as session:
            return session.get(Incident, incident_id)

    def get_location(self, incident_id: int) -> Optional[Dict[str, Any]]:
        """
        Location view of one incident.

        Args:
            incident_id: Incident ID

        Returns:
            Address bundle with coordinates and descriptions, or None
        """
        incident = self.get_incident(incident_id)
        if incident is None:
            return None

        return {
            "id": incident.id,
            "latitude": incident.latitude,
            "longitude": incident.longitude,
            **incident.location_details(),
            "photo_analysis": incident.photo_description,
            "user_description": incident.description or "",
            "reported_datetime": incident.reported_datetime,
        }

    def list_incidents(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        department: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[Incident]:
        """
        List incidents, newest first.

        Args:
            category: Category filter ("All" means no filter)
            status: Status filter
            department: Department filter
            user_id: Reporter filter

        Returns:
            Matching incidents
        """
        query = select(Incident)

        if category and category != ALL_CATEGORIES:
            query = query.where(Incident.category == category)
        if status:
            query = query.where(Incident.status == status)
        if department:
            query = query.where(Incident.department == department)
        if user_id:
            query = query.where(Incident.user_id == user_id)

        query = query.order_by(Incident.created_at.desc(), Incident.id.desc())

        with self.db.get_session() as session:
            return list(session.scalars(query).all())

    def list_for_user(self, user_id: str) -> List[Incident]:
        """Reports submitted by one user, newest first."""
        return self.list_incidents(user_id=str(user_id))

    def list_for_admin(
        self,
        selected_state: Optional[str] = None,
        selected_taluk: Optional[str] = None,
    ) -> List[Incident]:
        """
        Every report, optionally narrowed by state and taluk.

        Args:
            selected_state: Exact state name
            selected_taluk: Exact taluk/subdistrict name

        Returns:
            Matching incidents, newest first
        """
        query = select(Incident)
        if selected_state:
            query = query.where(Incident.state == selected_state)
        if selected_taluk:
            query = query.where(Incident.taluk == selected_taluk)
        query = query.order_by(Incident.created_at.desc(), Incident.id.desc())

        with self.db.get_session() as session:
            return list(session.scalars(query).all())

    @staticmethod
    def heatmap_points(incidents: List[Incident]) -> List[Dict[str, float]]:
        """Coordinates of incidents that have them."""
        return [
            {"lat": i.latitude, "lng": i.longitude}
            for i in incidents
            if i.has_coordinates
        ]

    def list_departments(self) -> List[Department]:
        """Department registry."""
        with self.db.get_session() as session:
            return list(session.scalars(select(Department).order_by(Department.id)).all())

    def get_statistics(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Aggregate counts for the admin dashboard.

        Args:
            month: Restrict category/location/status counts to this month (1-12)
            year: Year for the month filter (both must be given)

        Returns:
            Counts by category, top locations, by status, and per month
        """
        month_key = func.strftime("%Y-%m", Incident.created_at)
        if self.db.engine.dialect.name != "sqlite":
            month_key = func.to_char(Incident.created_at, "YYYY-MM")

        def scoped(query):
            if month and year:
                return query.where(month_key == f"{int(year):04d}-{int(month):02d}")
            return query

        count = func.count(Incident.id).label("count")

        with self.db.get_session() as session:
            by_category = session.execute(
                scoped(select(Incident.category, count)).group_by(Incident.category)
            ).all()
            top_areas = session.execute(
                scoped(select(Incident.location, count))
                .group_by(Incident.location)
                .order_by(count.desc())
                .limit(10)
            ).all()
            by_status = session.execute(
                scoped(select(Incident.status, count)).group_by(Incident.status)
            ).all()
            monthly = session.execute(
                select(month_key.label("month"), count)
                .group_by(month_key)
                .order_by(month_key.desc())
                .limit(12)
            ).all()

        return {
            "byCategory": [{"category": c, "count": n} for c, n in by_category],
            "topAreas": [{"location": loc, "count": n} for loc, n in top_areas],
            "byStatus": [{"status": s, "count": n} for s, n in by_status],
            "monthly": [{"month": m, "count": n} for m, n in monthly],
        }
