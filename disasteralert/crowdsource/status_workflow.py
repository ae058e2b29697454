"""
Admin status workflow for incidents.

Statuses form a validity set rather than a forward-only graph: any of the
four values may be written at any time. Concurrent writes to the same
incident are last-write-wins.
"""

import logging
from typing import Optional

from sqlalchemy import update

from disasteralert.core.constants import STATUS_VALUES
from disasteralert.core.exceptions import IncidentNotFoundError, InvalidStatusError
from disasteralert.core.time_utils import utcnow
from disasteralert.database.connection import DatabaseConnection
from disasteralert.database.models import Incident

logger = logging.getLogger(__name__)


def is_valid_status(status: Optional[str]) -> bool:
    return status in STATUS_VALUES


class StatusWorkflow:
    """Validates and applies status/department changes."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def update_status(
        self,
        incident_id: int,
        status: Optional[str],
        department: Optional[str] = None,
    ) -> Incident:
        """
        Set an incident's status and department.

        Args:
            incident_id: Incident ID
            status: One of Reported, Verified, In Progress, Resolved
            department: Free-form department label; omitted clears it

        Returns:
            The incident as stored after the update

        Raises:
            InvalidStatusError: status is not one of the four values
            IncidentNotFoundError: no incident with this id
        """
        if not is_valid_status(status):
            raise InvalidStatusError(f"Invalid status: {status!r}")

        with self.db.get_session() as session:
            result = session.execute(
                update(Incident)
                .where(Incident.id == incident_id)
                .values(
                    status=status,
                    department=department or None,
                    updated_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise IncidentNotFoundError(f"Incident {incident_id} not found")

            incident = session.get(Incident, incident_id, populate_existing=True)

        logger.info(f"Incident {incident_id} status -> {status} (department={department or None})")
        return incident
