"""
Shared pytest fixtures.

Each test that touches the database gets its own SQLite file (via
aiosqlite), so sessions opened by the code under test and by the test
itself see the same committed data.

Environment overrides are applied before importing app modules so that
Settings() picks them up.
"""
import os

# Set test environment BEFORE importing any app module
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SLA_MONITOR_INTERVAL_SECONDS", "0")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from helpdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from helpdesk.shared.infrastructure.events import EventBus
from helpdesk.sla.infrastructure.models import SLARuleModel  # noqa: F401
from helpdesk.sla.infrastructure.repositories import SQLAlchemySLARuleRepository
from helpdesk.tickets.infrastructure.models import TicketModel, CommentModel  # noqa: F401

from support import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite database file with all tables created."""
    init_database(f"sqlite+aiosqlite:///{tmp_path / 'helpdesk.db'}")
    await create_tables()
    yield
    await close_database()


@pytest_asyncio.fixture
async def db_session(database):
    """Session committed when the test finishes."""
    async with get_session_context() as session:
        yield session


@pytest_asyncio.fixture
async def rule_repository(db_session) -> SQLAlchemySLARuleRepository:
    return SQLAlchemySLARuleRepository(db_session)


@pytest_asyncio.fixture
async def client(database, clock):
    """
    AsyncClient for the FastAPI app with:
    - the per-test database
    - the request clock overridden with the test's FakeClock
    """
    from helpdesk.main import app
    from helpdesk.shared.api.dependencies import get_clock

    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
