"""
Database module for DisasterAlert
SQLAlchemy persistence for incidents and departments
"""

from .connection import DatabaseConnection, init_db
from .models import (
    Base,
    Incident,
    Department,
    ADDRESS_FIELDS,
)

__all__ = [
    "DatabaseConnection",
    "init_db",
    "Base",
    "Incident",
    "Department",
    "ADDRESS_FIELDS",
]
