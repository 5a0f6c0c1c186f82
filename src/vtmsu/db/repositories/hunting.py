"""
vtmsu.db.repositories.hunting

Repository for hunting grounds, hunt targets and their spawned instances.

Responsibilities:
- Manage hunting grounds (zones that spawn instances).
- Manage hunt targets (`HuntingData`) and their narrative descriptions.
- Spawn instances, list the ones active at a point in time, purge expired ones.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vtmsu.db.models import HuntingData, HuntingDescription, HuntingGround, HuntingInstance
from vtmsu.db.repositories.common import apply_changes


def _active_at(at: datetime):
    return or_(
        HuntingInstance.temporary.is_not(True),
        HuntingInstance.expires.is_(None),
        HuntingInstance.expires > at,
    )


def _select_target(target_id: int):
    return (
        select(HuntingData)
        .where(HuntingData.id == target_id)
        .options(selectinload(HuntingData.descriptions))
        .execution_options(populate_existing=True)
    )


class HuntingRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # Grounds

    async def create_ground(self, **fields: Any) -> HuntingGround:
        ground = HuntingGround()
        apply_changes(ground, fields)
        self._session.add(ground)
        await self._session.flush()
        await self._session.refresh(ground)
        return ground

    async def get_ground(self, ground_id: int) -> HuntingGround | None:
        return await self._session.get(HuntingGround, ground_id)

    async def list_grounds(self) -> list[HuntingGround]:
        stmt = select(HuntingGround).order_by(HuntingGround.name, HuntingGround.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def update_ground(self, ground_id: int, changes: dict[str, Any]) -> HuntingGround | None:
        ground = await self._session.get(HuntingGround, ground_id)
        if ground is None:
            return None
        apply_changes(ground, changes)
        await self._session.flush()
        await self._session.refresh(ground)
        return ground

    async def delete_ground(self, ground_id: int) -> bool:
        # Instances survive with groundId set to NULL.
        result = await self._session.execute(
            delete(HuntingGround).where(HuntingGround.id == ground_id)
        )
        return result.rowcount > 0

    async def count_active_instances(self, ground_id: int, *, at: datetime) -> int:
        stmt = (
            select(func.count(HuntingInstance.id))
            .where(HuntingInstance.ground_id == ground_id)
            .where(_active_at(at))
        )
        return int((await self._session.execute(stmt)).scalar_one())

    # Targets

    async def create_target(
        self,
        *,
        name: str | None = None,
        image: str | None = None,
        hunt_req: str | None = None,
        descriptions: Iterable[tuple[int | None, str]] = (),
    ) -> HuntingData:
        target = HuntingData(
            name=name,
            image=image,
            hunt_req=hunt_req,
            descriptions=[
                HuntingDescription(remains=remains, content=content)
                for remains, content in descriptions
            ],
        )
        self._session.add(target)
        await self._session.flush()
        return await self._reload_target(target.id)

    async def get_target(self, target_id: int) -> HuntingData | None:
        return (await self._session.execute(_select_target(target_id))).scalar_one_or_none()

    async def list_targets(self) -> list[HuntingData]:
        stmt = select(HuntingData).order_by(HuntingData.name, HuntingData.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def add_description(
        self, *, target_id: int, content: str, remains: int | None = None
    ) -> HuntingDescription:
        desc = HuntingDescription(target_id=target_id, content=content, remains=remains)
        self._session.add(desc)
        await self._session.flush()
        return desc

    async def delete_target(self, target_id: int) -> bool:
        # Descriptions and instances cascade; hunts on those instances keep their row.
        result = await self._session.execute(delete(HuntingData).where(HuntingData.id == target_id))
        return result.rowcount > 0

    # Instances

    async def spawn_instance(
        self,
        *,
        target_id: int,
        ground_id: int | None = None,
        coord_x: float | None = None,
        coord_y: float | None = None,
        remains: int | None = None,
        temporary: bool = False,
        expires: datetime | None = None,
    ) -> HuntingInstance:
        inst = HuntingInstance(
            target_id=target_id,
            ground_id=ground_id,
            coord_x=coord_x,
            coord_y=coord_y,
            remains=remains,
            temporary=temporary,
            expires=expires,
        )
        self._session.add(inst)
        await self._session.flush()
        await self._session.refresh(inst)
        return inst

    async def get_instance(self, instance_id: int) -> HuntingInstance | None:
        return await self._session.get(HuntingInstance, instance_id)

    async def active_instances(
        self, *, at: datetime, ground_id: int | None = None
    ) -> list[HuntingInstance]:
        stmt = (
            select(HuntingInstance)
            .where(_active_at(at))
            .options(selectinload(HuntingInstance.target))
            .order_by(HuntingInstance.id)
        )
        if ground_id is not None:
            stmt = stmt.where(HuntingInstance.ground_id == ground_id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def purge_expired(self, *, at: datetime) -> int:
        stmt = delete(HuntingInstance).where(
            HuntingInstance.temporary.is_(True),
            HuntingInstance.expires.is_not(None),
            HuntingInstance.expires <= at,
        ).execution_options(synchronize_session=False)
        return (await self._session.execute(stmt)).rowcount

    async def _reload_target(self, target_id: int) -> HuntingData:
        return (await self._session.execute(_select_target(target_id))).scalar_one()


# --- Module Notes -----------------------------------------------------------
# "Active" means: not temporary, or temporary without expiry, or expiring after `at`.
