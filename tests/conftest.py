"""
Shared fixtures for liftlog tests.

The API tests run the real app against a throwaway SQLite file; the engine
tests use the in-memory fakes from tests.fakes and a manual clock.
"""

import os
import tempfile

# Must be set before liftlog builds its engine from settings
_DB_DIR = tempfile.mkdtemp(prefix="liftlog-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/api.db"

import pytest
from fastapi.testclient import TestClient

from liftlog.core.config import Settings
from liftlog.db.session import build_engine, build_session_maker, create_all
from liftlog.services.storage import SqlAlchemyStorage
from tests.fakes import FakeWorkoutStorage, ManualScheduler, RecordingNotifier


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def storage() -> FakeWorkoutStorage:
    return FakeWorkoutStorage()


@pytest.fixture
async def session_maker(tmp_path):
    """Session factory bound to a fresh SQLite database in tmp_path."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'liftlog.db'}")
    await create_all(engine)
    yield build_session_maker(engine)
    await engine.dispose()


@pytest.fixture
async def sql_storage(session_maker) -> SqlAlchemyStorage:
    return SqlAlchemyStorage(session_maker)


@pytest.fixture
def api_client():
    """TestClient running the app lifespan; cancels any workout left running."""
    from liftlog.main import app

    with TestClient(app) as client:
        yield client
        client.post("/api/v1/workouts/active/cancel")
