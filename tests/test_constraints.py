"""
tests.test_constraints

Database-enforced behaviour: cascades, SET NULL, RESTRICT, CHECK and key uniqueness.

Runs on SQLite with foreign keys switched on by `vtmsu.db.session.create_engine`.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError

from vtmsu.db.models import (
    Account,
    AccountType,
    Ability,
    Character,
    CharacterAbility,
    Clan,
    ClanInFaction,
    Faction,
    Hunt,
    HuntingDescription,
    HuntingInstance,
    HuntStatus,
    Post,
    ProductImage,
    Rule,
    Session,
)
from vtmsu.db.repositories.auth_adapter import AuthAdapterRepo
from vtmsu.db.repositories.catalog import CatalogRepo
from vtmsu.db.repositories.characters import CharacterRepo
from vtmsu.db.repositories.hunting import HuntingRepo
from vtmsu.db.repositories.hunts import HuntRepo
from vtmsu.db.repositories.posts import PostRepo
from vtmsu.db.repositories.products import ProductRepo
from vtmsu.db.repositories.users import UserRepo


async def _count(session, model, *where) -> int:
    return (await session.execute(select(func.count()).select_from(model).where(*where))).scalar_one()


@pytest.mark.asyncio
async def test_deleting_target_cascades_and_detaches_hunts(session, user):
    hunting = HuntingRepo(session)
    target = await hunting.create_target(name="Rat swarm", descriptions=[(3, "fresh"), (1, "thin")])
    inst = await hunting.spawn_instance(target_id=target.id)
    character = await CharacterRepo(session).create(created_by_id=user.id, name="Nosferatu")
    hunt = await HuntRepo(session).record(
        character_id=character.id,
        created_by_id=user.id,
        status=HuntStatus.success,
        instance_id=inst.id,
    )
    await session.commit()

    assert await hunting.delete_target(target.id) is True
    await session.commit()

    assert await _count(session, HuntingDescription, HuntingDescription.target_id == target.id) == 0
    assert await _count(session, HuntingInstance, HuntingInstance.target_id == target.id) == 0
    instance_id = (
        await session.execute(select(Hunt.instance_id).where(Hunt.id == hunt.id))
    ).scalar_one()
    assert instance_id is None


@pytest.mark.asyncio
async def test_deleting_ground_keeps_instances(session):
    hunting = HuntingRepo(session)
    ground = await hunting.create_ground(name="Docks")
    target = await hunting.create_target(name="Drunk sailor")
    inst = await hunting.spawn_instance(target_id=target.id, ground_id=ground.id)
    await session.commit()

    assert await hunting.delete_ground(ground.id) is True
    await session.commit()

    ground_id = (
        await session.execute(select(HuntingInstance.ground_id).where(HuntingInstance.id == inst.id))
    ).scalar_one()
    assert ground_id is None


@pytest.mark.asyncio
async def test_invalid_hunt_status_is_rejected(session, user):
    character = await CharacterRepo(session).create(created_by_id=user.id, name="Brujah")
    await session.commit()

    with pytest.raises(IntegrityError):
        await session.execute(
            insert(Hunt.__table__).values(
                {"characterId": character.id, "createdById": user.id, "status": "fled"}
            )
        )
    await session.rollback()


@pytest.mark.asyncio
async def test_duplicate_account_link_fails(session_factory, user):
    async with session_factory() as s1:
        await AuthAdapterRepo(s1).link_account(
            user_id=user.id, type=AccountType.oauth, provider="discord", provider_account_id="42"
        )
        await s1.commit()

    async with session_factory() as s2:
        with pytest.raises(IntegrityError):
            await AuthAdapterRepo(s2).link_account(
                user_id=user.id,
                type=AccountType.oauth,
                provider="discord",
                provider_account_id="42",
            )
        await s2.rollback()


@pytest.mark.asyncio
async def test_duplicate_verification_token_fails(session_factory):
    expires = datetime.now(tz=UTC) + timedelta(hours=1)
    async with session_factory() as s1:
        await AuthAdapterRepo(s1).create_verification_token(
            identifier="a@example.org", token="t0k3n", expires=expires
        )
        await s1.commit()

    async with session_factory() as s2:
        with pytest.raises(IntegrityError):
            await AuthAdapterRepo(s2).create_verification_token(
                identifier="a@example.org", token="t0k3n", expires=expires
            )
        await s2.rollback()


@pytest.mark.asyncio
@pytest.mark.parametrize("model", [Post, Rule, Character])
async def test_authored_rows_need_an_existing_creator(session, model):
    session.add(model(name="orphan", created_by_id="no-such-user"))
    with pytest.raises(IntegrityError):
        await session.flush()
    await session.rollback()


@pytest.mark.asyncio
async def test_deleting_clan_unassigns_characters(session, user):
    catalog = CatalogRepo(session)
    clan = await catalog.create(Clan, name="Tremere")
    faction = await catalog.create(Faction, name="Camarilla")
    await catalog.add_clan_to_faction(clan_id=clan.id, faction_id=faction.id)
    character = await CharacterRepo(session).create(
        created_by_id=user.id, name="Regent", clan_id=clan.id, faction_id=faction.id
    )
    await session.commit()

    assert await catalog.delete(Clan, clan.id) is True
    await session.commit()

    row = (
        await session.execute(
            select(Character.clan_id, Character.faction_id).where(Character.id == character.id)
        )
    ).one()
    assert row.clan_id is None
    assert row.faction_id == faction.id
    assert await _count(session, ClanInFaction, ClanInFaction.faction_id == faction.id) == 0


@pytest.mark.asyncio
async def test_deleting_user_cascades_auth_rows(session, user):
    adapter = AuthAdapterRepo(session)
    await adapter.link_account(
        user_id=user.id, type=AccountType.oauth, provider="discord", provider_account_id="7"
    )
    await adapter.create_session(
        session_token="s1", user_id=user.id, expires=datetime.now(tz=UTC) + timedelta(days=1)
    )
    await session.commit()

    assert await UserRepo(session).delete(user.id) is True
    await session.commit()

    assert await _count(session, Account, Account.user_id == user.id) == 0
    assert await _count(session, Session, Session.user_id == user.id) == 0


@pytest.mark.asyncio
async def test_deleting_user_with_content_is_restricted(session, user):
    await PostRepo(session).create(created_by_id=user.id, name="Elysium news")
    await session.commit()

    with pytest.raises(IntegrityError):
        await UserRepo(session).delete(user.id)
    await session.rollback()


@pytest.mark.asyncio
async def test_character_delete_cascades_traits_but_not_hunts(session, user):
    characters = CharacterRepo(session)
    ability = await CatalogRepo(session).create(Ability, name="Auspex")
    kept = await characters.create(created_by_id=user.id, name="Seer")
    hunted = await characters.create(created_by_id=user.id, name="Hunter")
    await characters.grant_ability(character_id=kept.id, ability_id=ability.id)
    await HuntRepo(session).record(
        character_id=hunted.id, created_by_id=user.id, status=HuntStatus.req_failure
    )
    await session.commit()

    assert await characters.delete(kept.id) is True
    await session.commit()
    assert await _count(session, CharacterAbility, CharacterAbility.character_id == kept.id) == 0

    with pytest.raises(IntegrityError):
        await characters.delete(hunted.id)
    await session.rollback()


@pytest.mark.asyncio
async def test_deleting_ability_removes_grants(session, user):
    ability = await CatalogRepo(session).create(Ability, name="Dominate")
    character = await CharacterRepo(session).create(created_by_id=user.id, name="Ventrue")
    await CharacterRepo(session).grant_ability(character_id=character.id, ability_id=ability.id)
    await session.commit()

    assert await CatalogRepo(session).delete(Ability, ability.id) is True
    await session.commit()
    assert await _count(session, CharacterAbility, CharacterAbility.character_id == character.id) == 0


@pytest.mark.asyncio
async def test_deleting_product_cascades_images(session):
    repo = ProductRepo(session)
    product = await repo.create(title="Fangs", images=["a.png", "b.png"])
    await session.commit()
    assert len(product.images) == 2

    assert await repo.delete(product.id) is True
    await session.commit()
    assert await _count(session, ProductImage, ProductImage.product_id == product.id) == 0


@pytest.mark.asyncio
async def test_hunt_needs_an_existing_creator(session, user):
    character = await CharacterRepo(session).create(created_by_id=user.id, name="Gangrel")
    await session.commit()

    with pytest.raises(IntegrityError):
        await HuntRepo(session).record(
            character_id=character.id, created_by_id="no-such-user", status=HuntStatus.success
        )
    await session.rollback()
