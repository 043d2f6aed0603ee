"""Fixtures for persistence tests against an in-memory SQLite database."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from placement.config import Config, DatabaseConfig
from placement.infrastructure.persistence.database import create_db_engine, create_session_factory
from placement.infrastructure.persistence.migrate import migrate
from placement.infrastructure.persistence.session import SerializedSession


@pytest_asyncio.fixture
async def engine():
    """Per-test engine; the in-memory database disappears with it."""
    config = Config(database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    engine = create_db_engine(config)
    await migrate(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine):
    factory = create_session_factory(engine)
    async with factory() as db_session:
        yield SerializedSession(db_session)
        await db_session.rollback()
