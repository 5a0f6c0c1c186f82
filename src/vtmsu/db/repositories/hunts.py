"""
vtmsu.db.repositories.hunts

Repository for `Hunt` records.

Responsibilities:
- Record a hunt outcome for a character (optionally against a spawned instance).
- Query hunt history per character or per instance.
"""

from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from vtmsu.db.models import Hunt, HuntStatus


class HuntRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(
        self,
        *,
        character_id: int,
        created_by_id: str,
        status: HuntStatus,
        instance_id: int | None = None,
    ) -> Hunt:
        hunt = Hunt(
            character_id=character_id,
            created_by_id=created_by_id,
            status=status,
            instance_id=instance_id,
        )
        self._session.add(hunt)
        await self._session.flush()
        await self._session.refresh(hunt)
        return hunt

    async def get(self, hunt_id: int) -> Hunt | None:
        return await self._session.get(Hunt, hunt_id)

    async def list_for_character(self, character_id: int, *, limit: int = 200) -> list[Hunt]:
        # Newest first; id breaks ties between hunts recorded within the same second.
        stmt = (
            select(Hunt)
            .where(Hunt.character_id == character_id)
            .order_by(desc(Hunt.created_at), desc(Hunt.id))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_for_instance(self, instance_id: int) -> list[Hunt]:
        stmt = select(Hunt).where(Hunt.instance_id == instance_id).order_by(Hunt.id)
        return list((await self._session.execute(stmt)).scalars().all())
