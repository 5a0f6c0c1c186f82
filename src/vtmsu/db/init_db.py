"""
vtmsu.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create (and drop) tables for local development and tests.
- Keep production migration workflow separate (Alembic).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from vtmsu.db import models  # noqa: F401  # registers every table on Base.metadata
from vtmsu.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Dev/test bootstrap: create tables if they don't exist.
    Production relies on Alembic migrations.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# --- Module Notes -----------------------------------------------------------
# These helpers are not used for prod. Deployments run `alembic upgrade head`.
