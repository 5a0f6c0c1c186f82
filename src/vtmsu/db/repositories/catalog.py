"""
vtmsu.db.repositories.catalog

Repository for the trait catalogs and groupings.

Responsibilities:
- Create/list/fetch/delete clans, factions, abilities and features.
- Maintain clan <-> faction membership.
- Restrict abilities/features to clans and query what a clan may take.
"""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vtmsu.db.models import (
    Ability,
    AbilityAvailable,
    Clan,
    ClanInFaction,
    Faction,
    Feature,
    FeatureAvailable,
)

CatalogEntry = TypeVar("CatalogEntry", Clan, Faction, Ability, Feature)


class CatalogRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, model: type[CatalogEntry], **fields: Any) -> CatalogEntry:
        row = model(**fields)
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, model: type[CatalogEntry], entry_id: int) -> CatalogEntry | None:
        return await self._session.get(model, entry_id)

    async def list_entries(
        self, model: type[CatalogEntry], *, visible_only: bool = False
    ) -> list[CatalogEntry]:
        stmt = select(model).order_by(model.name, model.id)
        if visible_only:
            stmt = stmt.where(model.visible_to_player.is_(True))
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, model: type[CatalogEntry], entry_id: int) -> bool:
        result = await self._session.execute(delete(model).where(model.id == entry_id))
        return result.rowcount > 0

    async def get_clan_with_factions(self, clan_id: int) -> Clan | None:
        stmt = select(Clan).where(Clan.id == clan_id).options(selectinload(Clan.factions))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_faction_with_clans(self, faction_id: int) -> Faction | None:
        stmt = select(Faction).where(Faction.id == faction_id).options(selectinload(Faction.clans))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def add_clan_to_faction(self, *, clan_id: int, faction_id: int) -> ClanInFaction:
        stmt = select(ClanInFaction).where(
            ClanInFaction.clan_id == clan_id, ClanInFaction.faction_id == faction_id
        )
        existing = (await self._session.execute(stmt)).scalars().first()
        if existing is not None:
            return existing
        link = ClanInFaction(clan_id=clan_id, faction_id=faction_id)
        self._session.add(link)
        await self._session.flush()
        return link

    async def remove_clan_from_faction(self, *, clan_id: int, faction_id: int) -> bool:
        stmt = delete(ClanInFaction).where(
            ClanInFaction.clan_id == clan_id, ClanInFaction.faction_id == faction_id
        )
        return (await self._session.execute(stmt)).rowcount > 0

    async def make_ability_available(self, *, ability_id: int, clan_id: int) -> AbilityAvailable:
        stmt = select(AbilityAvailable).where(
            AbilityAvailable.ability_id == ability_id, AbilityAvailable.clan_id == clan_id
        )
        existing = (await self._session.execute(stmt)).scalars().first()
        if existing is not None:
            return existing
        row = AbilityAvailable(ability_id=ability_id, clan_id=clan_id)
        self._session.add(row)
        await self._session.flush()
        return row

    async def make_feature_available(self, *, feature_id: int, clan_id: int) -> FeatureAvailable:
        stmt = select(FeatureAvailable).where(
            FeatureAvailable.feature_id == feature_id, FeatureAvailable.clan_id == clan_id
        )
        existing = (await self._session.execute(stmt)).scalars().first()
        if existing is not None:
            return existing
        row = FeatureAvailable(feature_id=feature_id, clan_id=clan_id)
        self._session.add(row)
        await self._session.flush()
        return row

    async def abilities_for_clan(
        self, clan_id: int, *, visible_only: bool = False
    ) -> list[Ability]:
        stmt = (
            select(Ability)
            .join(AbilityAvailable, AbilityAvailable.ability_id == Ability.id)
            .where(AbilityAvailable.clan_id == clan_id)
            .order_by(Ability.name, Ability.id)
        )
        if visible_only:
            stmt = stmt.where(Ability.visible_to_player.is_(True))
        return list((await self._session.execute(stmt)).scalars().unique().all())

    async def features_for_clan(
        self, clan_id: int, *, visible_only: bool = False
    ) -> list[Feature]:
        stmt = (
            select(Feature)
            .join(FeatureAvailable, FeatureAvailable.feature_id == Feature.id)
            .where(FeatureAvailable.clan_id == clan_id)
            .order_by(Feature.name, Feature.id)
        )
        if visible_only:
            stmt = stmt.where(Feature.visible_to_player.is_(True))
        return list((await self._session.execute(stmt)).scalars().unique().all())


# --- Module Notes -----------------------------------------------------------
# Availability rows are idempotent at the repository level; the tables themselves
# carry no unique constraint on (entry, clan).
