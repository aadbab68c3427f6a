"""
Pytest configuration and fixtures for FriendSocial tests.

Provides an in-memory database, session factory, a controllable clock and
sample users, activities and preferences.
"""

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
import sqlalchemy as sa
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from friendsocial.database import session_scope
from friendsocial.models.base import Base
from friendsocial.models.people import Location, User
from friendsocial.models.activities import Activity, ActivityPreference, PreferenceParticipant
from friendsocial.services.participants import ParticipationService
from friendsocial.services.scheduling_service import SchedulingService


# Monday
DEFAULT_NOW = datetime(2024, 6, 3, 8, 0, tzinfo=timezone.utc)


# Configure SQLite to enforce foreign key constraints in tests
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class FrozenClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """
    In-memory SQLite engine with all tables created.

    StaticPool keeps a single connection so every session sees the same
    database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    # Disable foreign key constraints for drop operations
    with engine.begin() as connection:
        connection.execute(sa.text("PRAGMA foreign_keys=OFF"))
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Session for direct model tests.

    Yields:
        Session: SQLAlchemy session for database operations
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(DEFAULT_NOW)


@pytest.fixture
def scheduling_service(session_factory: sessionmaker, clock: FrozenClock) -> SchedulingService:
    """SchedulingService with SQL readers and the frozen clock."""
    return SchedulingService(session_factory, clock=clock)


@pytest.fixture
def participation_service(session_factory: sessionmaker, clock: FrozenClock) -> ParticipationService:
    return ParticipationService(session_factory, clock=clock)


# =============================================================================
# Sample data
# =============================================================================


@pytest.fixture
def sample_location(session_factory: sessionmaker) -> Location:
    with session_scope(session_factory) as session:
        location = Location(
            name="Community Hall",
            address="1 Main Street",
            city="Springfield",
            country="USA",
        )
        session.add(location)
    return location


@pytest.fixture
def sample_users(session_factory: sessionmaker, sample_location: Location) -> list[User]:
    """
    Create three users: Alice, Bob and Carol.

    Returns:
        list[User]: Persisted users ordered by id
    """
    with session_scope(session_factory) as session:
        users = [
            User(name="Alice", email="alice@example.com", location_id=sample_location.id),
            User(name="Bob", email="bob@example.com", location_id=sample_location.id),
            User(name="Carol", email="carol@example.com"),
        ]
        session.add_all(users)
    return users


@pytest.fixture
def sample_activity(session_factory: sessionmaker, sample_location: Location) -> Activity:
    """An activity lasting 60 minutes."""
    with session_scope(session_factory) as session:
        activity = Activity(
            name="Board games",
            emoji="🎲",
            description="Weekly board game night",
            estimated_time=timedelta(minutes=60),
            location_id=sample_location.id,
            user_created=True,
        )
        session.add(activity)
    return activity


@pytest.fixture
def sample_preference(
    session_factory: sessionmaker,
    sample_users: list[User],
    sample_activity: Activity,
) -> ActivityPreference:
    """
    Alice's preference: every 2nd week on Monday, with Alice and Bob on the roster.

    Returns:
        ActivityPreference: A persisted preference
    """
    alice, bob, _ = sample_users
    with session_scope(session_factory) as session:
        preference = ActivityPreference(
            user_id=alice.id,
            activity_id=sample_activity.id,
            frequency=2,
            frequency_period="week",
            days_of_week="1",
        )
        session.add(preference)
        session.flush()
        session.add_all([
            PreferenceParticipant(user_activity_preference_id=preference.id, user_id=alice.id),
            PreferenceParticipant(user_activity_preference_id=preference.id, user_id=bob.id),
        ])
    return preference
