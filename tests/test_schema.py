"""
tests.test_schema

Static checks over the declared metadata (no database needed).
"""

from __future__ import annotations

import pytest

from vtmsu.db.base import TABLE_PREFIX, Base, table_name
from vtmsu.db import models

EXPECTED_TABLES = {
    "user",
    "account",
    "session",
    "verificationToken",
    "post",
    "rule",
    "huntingGround",
    "huntingData",
    "huntingInstance",
    "huntingDescription",
    "hunt",
    "character",
    "clan",
    "faction",
    "clanInFaction",
    "ability",
    "abilityAvailable",
    "characterAbilities",
    "feature",
    "featureAvailable",
    "characterFeatures",
    "product",
    "productImage",
}


def _fk_policy(table: str, column: str) -> str | None:
    col = Base.metadata.tables[table_name(table)].c[column]
    (fk,) = col.foreign_keys
    return fk.ondelete


def test_every_table_is_prefixed():
    assert TABLE_PREFIX == "vtmsu-drizzle-postgres_"
    assert set(Base.metadata.tables) == {table_name(t) for t in EXPECTED_TABLES}


def test_composite_primary_keys():
    account = Base.metadata.tables[table_name("account")]
    assert [c.name for c in account.primary_key.columns] == ["provider", "providerAccountId"]
    vt = Base.metadata.tables[table_name("verificationToken")]
    assert [c.name for c in vt.primary_key.columns] == ["identifier", "token"]


def test_named_indexes():
    def index_names(table: str) -> set[str]:
        return {ix.name for ix in Base.metadata.tables[table_name(table)].indexes}

    assert index_names("account") == {"account_userId_idx"}
    assert index_names("session") == {"session_userId_idx"}
    assert index_names("post") == {"createdById_idx", "post_name_idx"}


@pytest.mark.parametrize(
    "table,column,policy",
    [
        ("account", "userId", "CASCADE"),
        ("session", "userId", "CASCADE"),
        ("post", "createdById", "RESTRICT"),
        ("rule", "createdById", "RESTRICT"),
        ("character", "createdById", "RESTRICT"),
        ("character", "clanId", "SET NULL"),
        ("character", "factionId", "SET NULL"),
        ("hunt", "characterId", "RESTRICT"),
        ("hunt", "instanceId", "SET NULL"),
        ("huntingInstance", "targetId", "CASCADE"),
        ("huntingInstance", "groundId", "SET NULL"),
        ("huntingDescription", "targetId", "CASCADE"),
        ("clanInFaction", "clanId", "CASCADE"),
        ("clanInFaction", "factionId", "CASCADE"),
        ("abilityAvailable", "abilityId", "CASCADE"),
        ("featureAvailable", "abilityId", "CASCADE"),
        ("characterAbilities", "characterId", "CASCADE"),
        ("characterFeatures", "characterId", "CASCADE"),
        ("productImage", "productId", "CASCADE"),
    ],
)
def test_on_delete_policies(table: str, column: str, policy: str):
    assert _fk_policy(table, column) == policy


def test_hunt_status_is_check_constrained():
    status_type = Base.metadata.tables[table_name("hunt")].c.status.type
    assert status_type.create_constraint is True
    assert set(status_type.enums) == {"success", "exp_failure", "req_failure", "masq_failure"}


def test_physical_column_names_kept():
    character = Base.metadata.tables[table_name("character")]
    assert {"publicIngo", "createdById", "created_at", "updatedAt"} <= set(character.c.keys())
    assert "coordX" in Base.metadata.tables[table_name("huntingGround")].c


def test_feature_availability_keeps_deployed_column_name():
    table = Base.metadata.tables[table_name("featureAvailable")]
    assert set(table.c.keys()) == {"id", "abilityId", "clanId"}
    (fk,) = table.c.abilityId.foreign_keys
    assert fk.column.table.name == table_name("feature")
    assert models.FeatureAvailable.feature_id.property.columns[0] is table.c.abilityId


# --- Module Notes -----------------------------------------------------------
# DB-level behaviour of these declarations is exercised in test_constraints.py.
