"""
Database connection management for DisasterAlert
SQLite by default; any SQLAlchemy URL (e.g. PostgreSQL) is accepted.
"""

import os
import logging
from contextlib import contextmanager
from typing import Generator, List, Optional

from sqlalchemy import create_engine, select, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.exc import SQLAlchemyError

from disasteralert.core.config import settings
from disasteralert.core.constants import DEFAULT_DEPARTMENTS
from .models import Base, Department

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Database connection manager with connection pooling.

    Incidents are written by a single insert per submission; status
    updates are single conditional UPDATE statements.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30
    ):
        """
        Initialize database connection.

        Args:
            database_url: SQLAlchemy connection URL
            pool_size: Connection pool size (server databases only)
            max_overflow: Max connections beyond pool_size
            pool_timeout: Timeout for getting connection from pool
        """
        self.database_url = database_url or settings.database_url
        echo = os.getenv("DB_ECHO", "false").lower() == "true"

        if self.database_url.startswith("sqlite"):
            engine_kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in self.database_url or self.database_url == "sqlite://":
                # One shared connection so every session sees the same in-memory db
                engine_kwargs["poolclass"] = StaticPool
            self.engine = create_engine(self.database_url, echo=echo, **engine_kwargs)
        else:
            self.engine = create_engine(
                self.database_url,
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_pre_ping=True,
                echo=echo
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

        logger.info(f"Database connection initialized: {self._mask_url(self.database_url)}")

    def _mask_url(self, url: str) -> str:
        """Mask password in connection URL for logging."""
        if "@" in url and ":" in url:
            parts = url.split("@")
            credentials = parts[0].split(":")
            if len(credentials) >= 3:
                credentials[-1] = "****"
            return ":".join(credentials) + "@" + parts[1]
        return url

    def create_tables(self) -> None:
        """Create all database tables."""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create tables: {e}")
            raise

    def seed_departments(self, names: Optional[List[str]] = None) -> None:
        """Insert the default departments that do not exist yet."""
        wanted = names or DEFAULT_DEPARTMENTS
        with self.get_session() as session:
            existing = set(session.scalars(select(Department.name)).all())
            for name in wanted:
                if name not in existing:
                    session.add(Department(name=name))

    def check_connection(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Yields:
            SQLAlchemy session
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close database connection and dispose engine."""
        self.engine.dispose()
        logger.info("Database connection closed")


def init_db(database_url: Optional[str] = None) -> DatabaseConnection:
    """
    Open a database connection, create tables and seed departments.

    Args:
        database_url: Optional database URL override

    Returns:
        DatabaseConnection instance
    """
    db = DatabaseConnection(database_url=database_url)
    db.create_tables()
    db.seed_departments()
    return db
