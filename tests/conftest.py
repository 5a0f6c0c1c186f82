"""
tests.conftest

Shared fixtures.

Responsibilities:
- Provide a file-backed SQLite database per test (FK enforcement on).
- Provide sessions, a seeded user, and an API client wired to the same database.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from vtmsu.api.app import create_app
from vtmsu.db.init_db import drop_db, init_db
from vtmsu.db.models import User
from vtmsu.db.repositories.users import UserRepo
from vtmsu.db.session import create_engine, create_sessionmaker, session_scope
from vtmsu.settings import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'vtmsu-test.db'}",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield engine
    finally:
        await drop_db(engine)
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_scope(session_factory) as session:
        yield session


@pytest_asyncio.fixture
async def user(session: AsyncSession) -> User:
    u = await UserRepo(session).create(email="ventrue@example.org", name="Prince")
    await session.commit()
    return u


@pytest_asyncio.fixture
async def client(settings: Settings) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(settings=settings)
    # ASGITransport does not drive lifespan; enter it explicitly so tables exist.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c

