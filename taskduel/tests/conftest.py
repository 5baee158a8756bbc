"""
Shared fixtures: an in-memory SQLite database per test plus small factories.
"""
import os
import tempfile

os.environ.setdefault("TASKDUEL_LOG_DIR", os.path.join(tempfile.gettempdir(), "taskduel-test-logs"))
os.environ.setdefault("TASKDUEL_SCHEDULER_ENABLED", "false")
os.environ.setdefault("TASKDUEL_API_KEY", "test-key")

import pytest
from datetime import date
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskduel.database import Base
from taskduel import models  # noqa: F401  register models
from taskduel.models import User, Task, Challenge
from taskduel.constants import CHALLENGE_STATUS_PENDING


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    def _make_user(username: str, display_name: str = None, wins: int = 0, losses: int = 0) -> User:
        user = User(
            username=username,
            display_name=display_name or username.title(),
            total_wins=wins,
            total_losses=losses
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_task(db_session):
    def _make_task(user: User, name: str = "Gym", target: float = 2.0, points: int = 20,
                   active: bool = True) -> Task:
        task = Task(
            user_id=user.id,
            name=name,
            target_duration_hours=target,
            point_value=points,
            is_active=active
        )
        db_session.add(task)
        db_session.commit()
        db_session.refresh(task)
        return task
    return _make_task


@pytest.fixture
def make_challenge(db_session):
    def _make_challenge(creator: User, challenger: User, start: date, end: date,
                        status: str = CHALLENGE_STATUS_PENDING) -> Challenge:
        challenge = Challenge(
            creator_id=creator.id,
            challenger_id=challenger.id,
            start_date=start,
            end_date=end,
            status=status
        )
        db_session.add(challenge)
        db_session.commit()
        db_session.refresh(challenge)
        return challenge
    return _make_challenge


@pytest.fixture
def alice(make_user):
    return make_user("alice", "Alice Liddell")


@pytest.fixture
def bob(make_user):
    return make_user("bob", "Bob Builder")


@pytest.fixture
def today():
    return date(2025, 1, 15)
