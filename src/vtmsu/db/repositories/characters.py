"""
vtmsu.db.repositories.characters

Repository for `Character` entities and their trait grants.

Responsibilities:
- Create, fetch (with clan/faction/traits), list, patch and delete characters.
- Track the review state (pending -> verified).
- Grant/revoke abilities and features.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vtmsu.db.models import Character, CharacterAbility, CharacterFeature
from vtmsu.db.repositories.common import apply_changes


def _with_traits():
    return (
        selectinload(Character.clan),
        selectinload(Character.faction),
        selectinload(Character.abilities).selectinload(CharacterAbility.ability),
        selectinload(Character.features).selectinload(CharacterFeature.feature),
    )


def _select_one(character_id: int):
    # populate_existing refreshes server-side defaults and already-loaded trait collections.
    return (
        select(Character)
        .where(Character.id == character_id)
        .options(*_with_traits())
        .execution_options(populate_existing=True)
    )


class CharacterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, created_by_id: str, **fields: Any) -> Character:
        character = Character(created_by_id=created_by_id)
        apply_changes(character, fields)
        self._session.add(character)
        await self._session.flush()
        return await self._reload(character.id)

    async def get(self, character_id: int) -> Character | None:
        return (await self._session.execute(_select_one(character_id))).scalar_one_or_none()

    async def list_characters(
        self,
        *,
        created_by_id: str | None = None,
        clan_id: int | None = None,
        visible_only: bool = False,
        limit: int = 200,
    ) -> list[Character]:
        stmt = select(Character).order_by(Character.name, Character.id).limit(limit)
        if created_by_id is not None:
            stmt = stmt.where(Character.created_by_id == created_by_id)
        if clan_id is not None:
            stmt = stmt.where(Character.clan_id == clan_id)
        if visible_only:
            stmt = stmt.where(Character.visible.is_(True))
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, character_id: int, changes: dict[str, Any]) -> Character | None:
        character = await self._session.get(Character, character_id)
        if character is None:
            return None
        apply_changes(character, changes)
        await self._session.flush()
        return await self._reload(character_id)

    async def set_review_state(
        self, character_id: int, *, pending: bool, verified: bool
    ) -> Character | None:
        return await self.update(character_id, {"pending": pending, "verified": verified})

    async def delete(self, character_id: int) -> bool:
        # Trait grants cascade; recorded hunts block the delete (RESTRICT).
        result = await self._session.execute(delete(Character).where(Character.id == character_id))
        return result.rowcount > 0

    async def grant_ability(self, *, character_id: int, ability_id: int) -> CharacterAbility:
        grant = CharacterAbility(character_id=character_id, ability_id=ability_id)
        self._session.add(grant)
        await self._session.flush()
        return grant

    async def revoke_ability(self, *, character_id: int, ability_id: int) -> int:
        stmt = delete(CharacterAbility).where(
            CharacterAbility.character_id == character_id,
            CharacterAbility.ability_id == ability_id,
        )
        return (await self._session.execute(stmt)).rowcount

    async def grant_feature(
        self,
        *,
        character_id: int,
        feature_id: int,
        description: str | None = None,
        visible_to_player: bool = False,
    ) -> CharacterFeature:
        grant = CharacterFeature(
            character_id=character_id,
            feature_id=feature_id,
            description=description,
            visible_to_player=visible_to_player,
        )
        self._session.add(grant)
        await self._session.flush()
        return grant

    async def revoke_feature(self, *, character_id: int, feature_id: int) -> int:
        stmt = delete(CharacterFeature).where(
            CharacterFeature.character_id == character_id,
            CharacterFeature.feature_id == feature_id,
        )
        return (await self._session.execute(stmt)).rowcount

    async def _reload(self, character_id: int) -> Character:
        return (await self._session.execute(_select_one(character_id))).scalar_one()
