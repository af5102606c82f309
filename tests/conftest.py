import os
import sys
import tempfile
from pathlib import Path

# Keep settings, token and log files out of the real user data dir.
os.environ.setdefault("TASKBOARD_DATA_DIR", tempfile.mkdtemp(prefix="taskboard-tests-"))

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from models.session import AuthUser, Session as AuthSession
from services.task_store import TaskStore
from services.task_sync import SyncCoordinator
from tests.fakes import FakeCalendar


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory


@pytest.fixture()
def store(session_factory):
    return TaskStore(session_factory=session_factory)


@pytest.fixture()
def calendar():
    return FakeCalendar()


@pytest.fixture()
def auth_session():
    return AuthSession(
        user=AuthUser(id="user-1", email="reader@example.com"),
        provider_token="token-abc",
        time_zone="UTC",
    )


@pytest.fixture()
def anonymous_calendar_session():
    return AuthSession(user=AuthUser(id="user-1", email="reader@example.com"), provider_token="")


@pytest.fixture()
def coordinator(auth_session, store, calendar):
    return SyncCoordinator(auth_session, store, calendar_factory=lambda token: calendar)
