import sys
import os
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer
from sqlalchemy.ext.asyncio import AsyncSession

# Ensure project root is on sys.path so `import panel` works
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from database import Database
from database.models import Ambassador, AmbassadorStatus
from database.repositories import AmbassadorRepository
from panel.main import build_app
from services.notifications import AdminNotifier


@pytest_asyncio.fixture(scope="function")
async def db(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite database per test."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await database.create_all()
    
    yield database
    
    await database.close()


@pytest_asyncio.fixture(scope="function")
async def db_session(db: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests."""
    async with db.session_maker() as session:
        yield session
        await session.rollback()


async def _create_approved(
    db: Database,
    name: str = "Diana Prince",
    email: str = "diana@example.com",
    commission_rate: Decimal = Decimal("0.10"),
    **kwargs,
) -> Ambassador:
    """Create and commit an approved ambassador."""
    async with db.session() as session:
        return await AmbassadorRepository(session).create(
            name=name,
            email=email,
            status=AmbassadorStatus.APPROVED,
            commission_rate=commission_rate,
            **kwargs,
        )


async def _reload(db: Database, ambassador_id: int) -> Ambassador:
    """Read the committed state of an ambassador in a new session."""
    async with db.session() as session:
        return await AmbassadorRepository(session).get_by_id(ambassador_id)


@pytest_asyncio.fixture
async def ambassador(db: Database) -> Ambassador:
    """Approved ambassador with a 10% commission rate."""
    return await _create_approved(db)


@pytest.fixture
def make_ambassador(db: Database):
    """Factory creating committed approved ambassadors."""
    async def factory(**kwargs) -> Ambassador:
        return await _create_approved(db, **kwargs)
    return factory


@pytest.fixture
def reload(db: Database):
    """Read the committed state of an ambassador in a new session."""
    async def loader(ambassador_id: int) -> Ambassador:
        return await _reload(db, ambassador_id)
    return loader


@pytest.fixture
def bot() -> AsyncMock:
    """Telegram bot stand-in."""
    return AsyncMock()


@pytest.fixture
def notifier(bot) -> AdminNotifier:
    return AdminNotifier(bot, [111, 222])


@pytest_asyncio.fixture
async def client(db: Database, notifier: AdminNotifier) -> AsyncGenerator[TestClient, None]:
    """HTTP client bound to a test server running the API."""
    app = build_app(db=db, notifier=notifier)
    async with TestClient(TestServer(app)) as test_client:
        yield test_client
