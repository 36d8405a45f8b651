"""
FolderNotes Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service tests run against a throwaway SQLite file per test (aiosqlite);
       HTTP tests run the real app, lifespan included, through httpx's
       ASGITransport.

Fixture Hierarchy (all function-scoped):
    ├── database: Store handle on a fresh SQLite file, schema created
    ├── db_session: Session from that handle
    ├── mock_db_session: AsyncMock session for failure paths
    ├── app_settings: Settings pointing the app at a fresh SQLite file
    └── test_client: HTTPX AsyncClient with the app lifespan entered
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings BEFORE any app imports so the module-level app never
# points at a real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="foldernotes_test_"), "default.db"
)
os.environ["LOG_LEVEL"] = "WARNING"

from foldernotes.config import Settings  # noqa: E402
from foldernotes.database import Database  # noqa: E402
from foldernotes.models import Folder, Note  # noqa: E402

BASE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """A store handle on an empty SQLite database with all tables created."""
    db = Database(sqlite_url(tmp_path / "test.db"))
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_folder(db_session):
    """Insert a folder with an explicit creation time (minutes after BASE_TIME)."""

    async def _make(name: str, minutes: int = 0) -> Folder:
        folder = Folder(name=name, created_at=BASE_TIME + timedelta(minutes=minutes))
        db_session.add(folder)
        await db_session.commit()
        return folder

    return _make


@pytest.fixture
def make_note(db_session):
    """Insert a note with explicit timestamps (minutes after BASE_TIME)."""

    async def _make(folder_id, title: str = "Note", minutes: int = 0, files=None) -> Note:
        stamp = BASE_TIME + timedelta(minutes=minutes)
        note = Note(
            folder_id=folder_id,
            title=title,
            content="<p>body</p>",
            files=files or [],
            created_at=stamp,
            updated_at=stamp,
        )
        db_session.add(note)
        await db_session.commit()
        return note

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        database_url=sqlite_url(tmp_path / "api.db"),
        log_level="WARNING",
        default_folder_name="My Notes",
    )


@pytest_asyncio.fixture
async def test_client(app_settings):
    """
    HTTPX AsyncClient talking to a fresh app.

    ASGITransport does not send lifespan events, so the lifespan is entered
    explicitly: the store handle, schema and default folder exist before the
    first request.
    """
    from foldernotes.main import create_app

    app = create_app(app_settings)
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
