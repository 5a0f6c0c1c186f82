"""
vtmsu.api.routers.catalog

Clans, factions, abilities and features.

Responsibilities:
- Read endpoints for players (only entries marked visible to players).
- Admin endpoints to manage entries, clan<->faction membership and
  per-clan trait availability.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT, HTTP_404_NOT_FOUND

from vtmsu.api.deps import db_session
from vtmsu.auth.deps import get_principal, require_roles
from vtmsu.auth.models import Principal, Role
from vtmsu.db.models import Ability, Clan, Faction, Feature
from vtmsu.db.repositories.catalog import CatalogRepo

router = APIRouter(prefix="/v1/catalog", tags=["catalog"])

_admin = [Depends(require_roles(Role.admin))]

Kind = Literal["clans", "factions", "abilities", "features"]


class _EntryIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=256)
    content: str | None = None
    visible_to_player: bool = False


class ClanIn(_EntryIn):
    icon: str | None = Field(default=None, max_length=255)


class FactionIn(_EntryIn):
    icon: str | None = Field(default=None, max_length=255)


class AbilityIn(_EntryIn):
    icon: str | None = Field(default=None, max_length=255)
    expertise: bool = False
    requirement_id: int | None = None


class FeatureIn(_EntryIn):
    cost: int | None = None


class _EntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    content: str | None
    visible_to_player: bool | None


class ClanOut(_EntryOut):
    icon: str | None


class FactionOut(_EntryOut):
    icon: str | None


class AbilityOut(_EntryOut):
    icon: str | None
    expertise: bool | None
    requirement_id: int | None


class FeatureOut(_EntryOut):
    cost: int | None


class ClanDetail(ClanOut):
    factions: list[FactionOut]


class FactionDetail(FactionOut):
    clans: list[ClanOut]


class IdRef(BaseModel):
    id: int


_KINDS: dict[str, tuple[type, type[BaseModel], type[BaseModel]]] = {
    "clans": (Clan, ClanIn, ClanOut),
    "factions": (Faction, FactionIn, FactionOut),
    "abilities": (Ability, AbilityIn, AbilityOut),
    "features": (Feature, FeatureIn, FeatureOut),
}


@router.get("/clans/{clan_id}", response_model=ClanDetail)
async def get_clan(
    clan_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> ClanDetail:
    clan = await CatalogRepo(session).get_clan_with_factions(clan_id)
    if clan is None or not (principal.is_admin or clan.visible_to_player):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Clan not found")
    return ClanDetail.model_validate(clan)


@router.get("/factions/{faction_id}", response_model=FactionDetail)
async def get_faction(
    faction_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> FactionDetail:
    faction = await CatalogRepo(session).get_faction_with_clans(faction_id)
    if faction is None or not (principal.is_admin or faction.visible_to_player):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Faction not found")
    return FactionDetail.model_validate(faction)


@router.get("/clans/{clan_id}/abilities", response_model=list[AbilityOut])
async def list_clan_abilities(
    clan_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[AbilityOut]:
    rows = await CatalogRepo(session).abilities_for_clan(
        clan_id, visible_only=not principal.is_admin
    )
    return [AbilityOut.model_validate(a) for a in rows]


@router.get("/clans/{clan_id}/features", response_model=list[FeatureOut])
async def list_clan_features(
    clan_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[FeatureOut]:
    rows = await CatalogRepo(session).features_for_clan(
        clan_id, visible_only=not principal.is_admin
    )
    return [FeatureOut.model_validate(f) for f in rows]


@router.post("/clans/{clan_id}/abilities", status_code=201, dependencies=_admin)
async def make_ability_available(
    clan_id: int, body: IdRef, session: AsyncSession = Depends(db_session)
) -> dict[str, int]:
    row = await CatalogRepo(session).make_ability_available(ability_id=body.id, clan_id=clan_id)
    await session.commit()
    return {"id": row.id, "clan_id": row.clan_id, "ability_id": row.ability_id}


@router.post("/clans/{clan_id}/features", status_code=201, dependencies=_admin)
async def make_feature_available(
    clan_id: int, body: IdRef, session: AsyncSession = Depends(db_session)
) -> dict[str, int]:
    row = await CatalogRepo(session).make_feature_available(feature_id=body.id, clan_id=clan_id)
    await session.commit()
    return {"id": row.id, "clan_id": row.clan_id, "feature_id": row.feature_id}


@router.post("/factions/{faction_id}/clans", status_code=201, dependencies=_admin)
async def add_clan_to_faction(
    faction_id: int, body: IdRef, session: AsyncSession = Depends(db_session)
) -> dict[str, int]:
    row = await CatalogRepo(session).add_clan_to_faction(clan_id=body.id, faction_id=faction_id)
    await session.commit()
    return {"id": row.id, "clan_id": row.clan_id, "faction_id": row.faction_id}


@router.delete(
    "/factions/{faction_id}/clans/{clan_id}",
    status_code=HTTP_204_NO_CONTENT,
    dependencies=_admin,
)
async def remove_clan_from_faction(
    faction_id: int, clan_id: int, session: AsyncSession = Depends(db_session)
) -> Response:
    if not await CatalogRepo(session).remove_clan_from_faction(
        clan_id=clan_id, faction_id=faction_id
    ):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Clan is not in faction")
    await session.commit()
    return Response(status_code=HTTP_204_NO_CONTENT)


# Generic entry endpoints; declared last so the specific routes above win.


@router.get("/{kind}")
async def list_entries(
    kind: Kind,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    model, _, out = _KINDS[kind]
    rows = await CatalogRepo(session).list_entries(model, visible_only=not principal.is_admin)
    return [out.model_validate(r).model_dump() for r in rows]


@router.post("/{kind}", status_code=201, dependencies=_admin)
async def create_entry(
    kind: Kind,
    body: dict[str, Any] = Body(...),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    model, schema_in, out = _KINDS[kind]
    try:
        data = schema_in.model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    row = await CatalogRepo(session).create(model, **data.model_dump())
    await session.commit()
    return out.model_validate(row).model_dump()


@router.delete("/{kind}/{entry_id}", status_code=HTTP_204_NO_CONTENT, dependencies=_admin)
async def delete_entry(
    kind: Kind, entry_id: int, session: AsyncSession = Depends(db_session)
) -> Response:
    model, _, _ = _KINDS[kind]
    if not await CatalogRepo(session).delete(model, entry_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Entry not found")
    await session.commit()
    return Response(status_code=HTTP_204_NO_CONTENT)
