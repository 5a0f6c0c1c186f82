"""
tests.test_repositories

Repository behaviour against a real (SQLite) database.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import inspect

from vtmsu.db.init_db import drop_db
from vtmsu.db.models import Ability, Clan, Faction, Feature, HuntStatus
from vtmsu.db.repositories.catalog import CatalogRepo
from vtmsu.db.repositories.characters import CharacterRepo
from vtmsu.db.repositories.hunting import HuntingRepo
from vtmsu.db.repositories.hunts import HuntRepo
from vtmsu.db.repositories.posts import PostRepo
from vtmsu.db.repositories.products import ProductRepo
from vtmsu.db.repositories.rules import RuleRepo
from vtmsu.db.repositories.users import UserRepo


@pytest.mark.asyncio
async def test_user_defaults_and_lookup(session):
    repo = UserRepo(session)
    created = await repo.create(email="malkav@example.org", name="Seer")
    await session.commit()

    assert created.id
    assert created.email_verified is not None
    assert (await repo.get_by_email("malkav@example.org")).id == created.id
    assert await repo.get_by_email("nobody@example.org") is None


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(session, user):
    with pytest.raises(ValueError):
        await UserRepo(session).update(user.id, {"password": "hunter2"})


@pytest.mark.asyncio
async def test_character_defaults_review_and_traits(session, user):
    catalog = CatalogRepo(session)
    clan = await catalog.create(Clan, name="Toreador", visible_to_player=True)
    ability = await catalog.create(Ability, name="Presence")
    feature = await catalog.create(Feature, name="Eidetic memory", cost=2)
    repo = CharacterRepo(session)

    character = await repo.create(created_by_id=user.id, name="Artist", clan_id=clan.id)
    assert character.pending is False
    assert character.verified is False
    assert character.visible is False
    assert character.clan.name == "Toreador"
    assert character.abilities == []

    reviewed = await repo.set_review_state(character.id, pending=False, verified=True)
    assert reviewed.verified is True

    await repo.grant_ability(character_id=character.id, ability_id=ability.id)
    await repo.grant_feature(
        character_id=character.id, feature_id=feature.id, description="Never forgets a face"
    )
    await session.commit()

    loaded = await repo.get(character.id)
    assert [a.ability.name for a in loaded.abilities] == ["Presence"]
    assert [(f.feature.name, f.description) for f in loaded.features] == [
        ("Eidetic memory", "Never forgets a face")
    ]

    assert await repo.revoke_ability(character_id=character.id, ability_id=ability.id) == 1
    await session.commit()
    assert (await repo.get(character.id)).abilities == []


@pytest.mark.asyncio
async def test_list_characters_filters(session, user):
    repo = CharacterRepo(session)
    other = await UserRepo(session).create(email="other@example.org")
    await repo.create(created_by_id=user.id, name="Alpha", visible=True)
    await repo.create(created_by_id=user.id, name="Beta")
    await repo.create(created_by_id=other.id, name="Gamma", visible=True)
    await session.commit()

    mine = await repo.list_characters(created_by_id=user.id)
    assert [c.name for c in mine] == ["Alpha", "Beta"]
    visible = await repo.list_characters(visible_only=True)
    assert [c.name for c in visible] == ["Alpha", "Gamma"]
    assert len(await repo.list_characters(limit=1)) == 1


@pytest.mark.asyncio
async def test_catalog_membership_and_availability(session):
    catalog = CatalogRepo(session)
    clan = await catalog.create(Clan, name="Gangrel")
    camarilla = await catalog.create(Faction, name="Camarilla")
    anarchs = await catalog.create(Faction, name="Anarchs")
    shown = await catalog.create(Ability, name="Protean", visible_to_player=True)
    hidden = await catalog.create(Ability, name="Secret art")
    feature = await catalog.create(Feature, name="Wolf kin", visible_to_player=True)

    first = await catalog.add_clan_to_faction(clan_id=clan.id, faction_id=camarilla.id)
    again = await catalog.add_clan_to_faction(clan_id=clan.id, faction_id=camarilla.id)
    assert first.id == again.id
    await catalog.add_clan_to_faction(clan_id=clan.id, faction_id=anarchs.id)

    await catalog.make_ability_available(ability_id=shown.id, clan_id=clan.id)
    await catalog.make_ability_available(ability_id=hidden.id, clan_id=clan.id)
    await catalog.make_ability_available(ability_id=hidden.id, clan_id=clan.id)
    await catalog.make_feature_available(feature_id=feature.id, clan_id=clan.id)
    await session.commit()

    with_factions = await catalog.get_clan_with_factions(clan.id)
    assert sorted(f.name for f in with_factions.factions) == ["Anarchs", "Camarilla"]
    assert [c.name for c in (await catalog.get_faction_with_clans(anarchs.id)).clans] == ["Gangrel"]

    assert [a.name for a in await catalog.abilities_for_clan(clan.id)] == ["Protean", "Secret art"]
    assert [a.name for a in await catalog.abilities_for_clan(clan.id, visible_only=True)] == [
        "Protean"
    ]
    assert [f.name for f in await catalog.features_for_clan(clan.id)] == ["Wolf kin"]

    assert await catalog.remove_clan_from_faction(clan_id=clan.id, faction_id=anarchs.id) is True
    assert await catalog.remove_clan_from_faction(clan_id=clan.id, faction_id=anarchs.id) is False


@pytest.mark.asyncio
async def test_list_entries_visibility(session):
    catalog = CatalogRepo(session)
    await catalog.create(Faction, name="Sabbat")
    await catalog.create(Faction, name="Camarilla", visible_to_player=True)
    await session.commit()

    assert [f.name for f in await catalog.list_entries(Faction)] == ["Camarilla", "Sabbat"]
    assert [f.name for f in await catalog.list_entries(Faction, visible_only=True)] == ["Camarilla"]


@pytest.mark.asyncio
async def test_ground_defaults(session):
    ground = await HuntingRepo(session).create_ground(name="Old town", radius=50)
    assert ground.min_inst == 0
    assert ground.delay == 3600
    assert ground.created_at is not None


@pytest.mark.asyncio
async def test_active_instances_and_purge(session):
    hunting = HuntingRepo(session)
    now = datetime.now(tz=UTC)
    ground = await hunting.create_ground(name="Harbour")
    target = await hunting.create_target(name="Tourist", descriptions=[(None, "lost")])
    permanent = await hunting.spawn_instance(target_id=target.id, ground_id=ground.id)
    open_ended = await hunting.spawn_instance(target_id=target.id, temporary=True)
    expired = await hunting.spawn_instance(
        target_id=target.id, ground_id=ground.id, temporary=True, expires=now - timedelta(hours=1)
    )
    pending = await hunting.spawn_instance(
        target_id=target.id, ground_id=ground.id, temporary=True, expires=now + timedelta(hours=1)
    )
    await session.commit()

    active = await hunting.active_instances(at=now)
    assert [i.id for i in active] == [permanent.id, open_ended.id, pending.id]
    assert active[0].target.name == "Tourist"
    assert [i.id for i in await hunting.active_instances(at=now, ground_id=ground.id)] == [
        permanent.id,
        pending.id,
    ]
    assert await hunting.count_active_instances(ground.id, at=now) == 2

    assert await hunting.purge_expired(at=now) == 1
    await session.commit()
    # Seen from a day earlier the purged instance would still be active.
    earlier = await hunting.active_instances(at=now - timedelta(days=1))
    assert [i.id for i in earlier] == [permanent.id, open_ended.id, pending.id]
    assert expired.id not in {i.id for i in earlier}


@pytest.mark.asyncio
async def test_target_descriptions(session):
    hunting = HuntingRepo(session)
    target = await hunting.create_target(name="Junkie", descriptions=[(2, "shaky")])
    await hunting.add_description(target_id=target.id, content="asleep", remains=1)
    await session.commit()

    loaded = await hunting.get_target(target.id)
    assert sorted(d.content for d in loaded.descriptions) == ["asleep", "shaky"]


@pytest.mark.asyncio
async def test_hunt_history_newest_first(session, user):
    character = await CharacterRepo(session).create(created_by_id=user.id, name="Stalker")
    hunts = HuntRepo(session)
    ids = []
    for status in (HuntStatus.success, HuntStatus.exp_failure, HuntStatus.masq_failure):
        ids.append(
            (await hunts.record(character_id=character.id, created_by_id=user.id, status=status)).id
        )
    await session.commit()

    history = await hunts.list_for_character(character.id)
    assert [h.id for h in history] == list(reversed(ids))
    assert history[0].status is HuntStatus.masq_failure
    latest_two = await hunts.list_for_character(character.id, limit=2)
    assert [h.id for h in latest_two] == list(reversed(ids))[:2]


@pytest.mark.asyncio
async def test_rules_ordering(session, user):
    rules = RuleRepo(session)
    await rules.create(created_by_id=user.id, name="late", category_id=1)
    await rules.create(created_by_id=user.id, name="second", category_id=1, ordered_as=2)
    await rules.create(created_by_id=user.id, name="first", category_id=1, ordered_as=1)
    await rules.create(created_by_id=user.id, name="other", category_id=2, ordered_as=1)
    await session.commit()

    assert [r.name for r in await rules.list_ordered(category_id=1)] == ["first", "second", "late"]
    assert [r.name for r in await rules.list_ordered()] == ["first", "second", "late", "other"]


@pytest.mark.asyncio
async def test_latest_post(session, user):
    posts = PostRepo(session)
    assert await posts.latest() is None
    await posts.create(created_by_id=user.id, name="Old news")
    newest = await posts.create(created_by_id=user.id, name="Fresh news")
    await session.commit()
    assert (await posts.latest()).id == newest.id


@pytest.mark.asyncio
async def test_product_stock(session):
    repo = ProductRepo(session)
    product = await repo.create(title="Cloak", stock=2, price=9.5)
    await repo.create(title="Sold out", stock=0)
    await session.commit()

    assert (await repo.adjust_stock(product.id, -1)).stock == 1
    with pytest.raises(ValueError):
        await repo.adjust_stock(product.id, -5)
    assert await repo.adjust_stock(10_000, 1) is None

    assert [p.title for p in await repo.list_products(in_stock_only=True)] == ["Cloak"]

    await repo.add_image(product_id=product.id, source="cloak.png")
    await session.commit()
    assert [i.source for i in (await repo.get(product.id)).images] == ["cloak.png"]


@pytest.mark.asyncio
async def test_hunts_per_instance(session, user):
    hunting = HuntingRepo(session)
    target = await hunting.create_target(name="Night guard")
    first = await hunting.spawn_instance(target_id=target.id)
    second = await hunting.spawn_instance(target_id=target.id)
    character = await CharacterRepo(session).create(created_by_id=user.id, name="Prowler")
    hunts = HuntRepo(session)

    async def record(status, instance_id=None):
        return await hunts.record(
            character_id=character.id,
            created_by_id=user.id,
            status=status,
            instance_id=instance_id,
        )

    a = await record(HuntStatus.success, first.id)
    await record(HuntStatus.exp_failure, second.id)
    c = await record(HuntStatus.req_failure, first.id)
    await record(HuntStatus.success)
    await session.commit()

    assert [h.id for h in await hunts.list_for_instance(first.id)] == [a.id, c.id]
    assert [h.status for h in await hunts.list_for_instance(second.id)] == [HuntStatus.exp_failure]
    assert await hunts.list_for_instance(10_000) == []


@pytest.mark.asyncio
async def test_drop_db_removes_every_table(engine):
    def table_names(sync_conn):
        return inspect(sync_conn).get_table_names()

    async with engine.connect() as conn:
        assert len(await conn.run_sync(table_names)) == 23

    await drop_db(engine)
    async with engine.connect() as conn:
        assert await conn.run_sync(table_names) == []
