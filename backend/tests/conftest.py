"""Shared test fixtures for the files manager test suite.

Each test gets a fresh in-memory SQLite database, an in-memory cache with
a controllable clock, and its own storage directory. The app's
dependencies are overridden so no Redis server or filesystem outside
``tmp_path`` is touched.
"""

import os
import tempfile

# Configure the app before any files_manager imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["FOLDER_PATH"] = tempfile.mkdtemp(prefix="files_manager_test_")
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from files_manager.api.files import get_storage_root
from files_manager.core.cache import get_cache
from files_manager.core.config import settings
from files_manager.database import create_db_engine, create_session_factory, get_db, init_schema
from files_manager.main import app
from files_manager.core.rate_limit import limiter
from files_manager.repositories.file_repository import FileRepository
from files_manager.services.auth_service import create_user
from files_manager.services.file_service import FileService
from files_manager.services.job_service import JobService, ProcessingDispatcher
from files_manager.services.placement import PlacementPlanner
from files_manager.services.session_store import SessionStore
from tests.factories import PASSWORD, FakeCache


@pytest.fixture()
def engine():
    eng = create_db_engine("sqlite://", settings)
    init_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    """Per-test database session."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture()
def storage_root(tmp_path):
    return tmp_path / "storage"


@pytest.fixture()
def sessions(cache) -> SessionStore:
    return SessionStore(cache, settings.session_ttl_seconds)


@pytest.fixture()
def file_service(db, storage_root) -> FileService:
    repo = FileRepository(db)
    return FileService(
        file_repo=repo,
        planner=PlacementPlanner(repo, str(storage_root)),
        dispatcher=ProcessingDispatcher(JobService(db)),
    )


@pytest.fixture()
def user(db):
    return create_user(db, "bob@example.com", PASSWORD)


@pytest.fixture()
def other_user(db):
    return create_user(db, "eve@example.com", PASSWORD)


@pytest.fixture()
def client(db, cache, storage_root):
    """TestClient with DB, cache and storage dependencies overridden."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_storage_root] = lambda: str(storage_root)
    limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(sessions, user) -> dict:
    """``X-Token`` headers for ``user``."""
    return {"X-Token": sessions.create(user.user_id)}


@pytest.fixture()
def other_headers(sessions, other_user) -> dict:
    """``X-Token`` headers for ``other_user``."""
    return {"X-Token": sessions.create(other_user.user_id)}
