"""
Database configuration and session management.

Provides:
- Database engine creation with proper configuration
- SessionLocal factory for creating database sessions
- session_scope() transaction helper used by the service layer
- Database initialization utilities
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from friendsocial.config import get_settings

logger = logging.getLogger(__name__)

# Get settings
settings = get_settings()

# Validate production configuration
if settings.is_production:
    settings.validate_production_config()

# Configure engine based on database type
if settings.uses_sqlite:
    # SQLite-specific configuration
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},  # Allow multiple threads (needed for FastAPI)
        poolclass=StaticPool,  # Use static pool for SQLite (single-file database)
        echo=settings.log_level == "DEBUG",  # Log SQL statements in debug mode
    )

    # Enable foreign key constraints for SQLite
    @event.listens_for(Engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Enable foreign key constraints in SQLite."""
        if type(dbapi_conn).__module__.startswith("sqlite3"):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

else:
    # PostgreSQL-specific configuration
    engine = create_engine(
        settings.database_url,
        pool_size=5,  # Maximum number of connections in pool
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before using them
        echo=settings.log_level == "DEBUG",
    )


# Session factory
SessionLocal = sessionmaker(
    autocommit=False,  # Explicit commits required
    autoflush=False,  # Don't flush automatically before queries
    expire_on_commit=False,  # Returned entities stay readable after commit
    bind=engine,
)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Run one unit of work in a single transaction.

    Commits when the block exits normally, rolls back on any exception and
    re-raises it. The session is always closed.

    Usage:
        with session_scope(SessionLocal) as session:
            session.add(occurrence)
            # Automatic commit on context exit

    Args:
        factory: Session factory bound to the target engine

    Yields:
        Session: SQLAlchemy database session
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside FastAPI.

    Usage for scripts, tests, or maintenance tasks:
        with get_db_context() as db:
            occurrence = db.get(ScheduledOccurrence, 1)
            occurrence.is_active = False

    Yields:
        Session: SQLAlchemy database session
    """
    with session_scope(SessionLocal) as db:
        yield db


def init_db() -> None:
    """
    Initialize database by creating all tables.

    This is useful for development and testing. In production, use Alembic migrations.
    """
    from friendsocial.models.base import Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def check_connection() -> bool:
    """
    Test database connection.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
