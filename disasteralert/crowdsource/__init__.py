"""
DisasterAlert - Crowdsource Module
Stores citizen incident reports and serves status, nearby and read queries.
"""

from disasteralert.crowdsource.report_handler import IncidentHandler
from disasteralert.crowdsource.status_workflow import StatusWorkflow, is_valid_status
from disasteralert.crowdsource.nearby import NearbyQueryEngine, NearbyIncident
from disasteralert.crowdsource.photo_store import PhotoStore

__all__ = [
    # Report Handler
    "IncidentHandler",
    # Status Workflow
    "StatusWorkflow",
    "is_valid_status",
    # Nearby
    "NearbyQueryEngine",
    "NearbyIncident",
    # Photo Store
    "PhotoStore",
]
