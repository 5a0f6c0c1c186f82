"""
vtmsu.db.base

SQLAlchemy declarative base and the table-name creator.

Responsibilities:
- Provide a shared DeclarativeBase for all ORM models.
- Prefix every physical table name so one database can host several projects.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase

TABLE_PREFIX = "vtmsu-drizzle-postgres_"


def table_name(name: str) -> str:
    return f"{TABLE_PREFIX}{name}"


def fk(name: str, column: str = "id") -> str:
    """Target string for `ForeignKey` pointing at a prefixed table."""
    return f"{table_name(name)}.{column}"


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# All ORM models should inherit from `Base` so Alembic and metadata discovery work.
# Index names are global in PostgreSQL, so they are not prefixed automatically.
