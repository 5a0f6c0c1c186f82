"""
vtmsu.api.routers.characters

Character sheet endpoints.

Responsibilities:
- Create/list/read/patch/delete characters owned by the caller.
- Let admins review characters (pending/verified) and grant traits.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT, HTTP_404_NOT_FOUND

from vtmsu.api.deps import db_session, settings_dep
from vtmsu.auth.deps import get_principal, require_roles
from vtmsu.auth.models import Principal, Role
from vtmsu.db.models import Character
from vtmsu.db.repositories.characters import CharacterRepo
from vtmsu.observability.logging import get_logger
from vtmsu.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1/characters", tags=["characters"])


class CharacterFields(BaseModel):
    name: str | None = Field(default=None, max_length=256)
    faction_id: int | None = None
    clan_id: int | None = None
    visible: bool | None = None
    additional_abilities: int | None = None
    player_id: str | None = Field(default=None, max_length=255)
    player_name: str | None = Field(default=None, max_length=255)
    player_contact: str | None = Field(default=None, max_length=255)
    image: str | None = Field(default=None, max_length=255)
    age: str | None = Field(default=None, max_length=255)
    sire: str | None = Field(default=None, max_length=255)
    title: str | None = Field(default=None, max_length=255)
    status: str | None = Field(default=None, max_length=255)
    childer: str | None = Field(default=None, max_length=255)
    hunt_req: str | None = Field(default=None, max_length=255)
    comment: str | None = None
    p_comment: str | None = None
    ambition: str | None = None
    public_info: str | None = None
    content: str | None = None


class CharacterCreate(CharacterFields):
    name: str = Field(min_length=1, max_length=256)


class ReviewRequest(BaseModel):
    pending: bool
    verified: bool


class GrantAbilityRequest(BaseModel):
    ability_id: int


class GrantFeatureRequest(BaseModel):
    feature_id: int
    description: str | None = None
    visible_to_player: bool = False


class NamedRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None


class CharacterAbilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ability_id: int | None
    ability: NamedRef | None


class CharacterFeatureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    feature_id: int | None
    description: str | None
    visible_to_player: bool | None
    feature: NamedRef | None


class CharacterSummary(CharacterFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pending: bool | None
    verified: bool | None
    created_by_id: str
    created_at: datetime
    updated_at: datetime | None


class CharacterResponse(CharacterSummary):
    clan: NamedRef | None
    faction: NamedRef | None
    abilities: list[CharacterAbilityResponse]
    features: list[CharacterFeatureResponse]


def _can_read(character: Character, principal: Principal) -> bool:
    return principal.is_admin or character.created_by_id == principal.user_id or bool(
        character.visible
    )


def _can_edit(character: Character, principal: Principal) -> bool:
    return principal.is_admin or character.created_by_id == principal.user_id


async def _load_for_edit(
    repo: CharacterRepo, character_id: int, principal: Principal
) -> Character:
    character = await repo.get(character_id)
    # Unknown and foreign characters look the same to the caller.
    if character is None or not _can_edit(character, principal):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Character not found")
    return character


@router.get("", response_model=list[CharacterSummary])
async def list_characters(
    mine: bool = False,
    clan_id: int | None = None,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> list[CharacterSummary]:
    repo = CharacterRepo(session)
    if mine:
        rows = await repo.list_characters(
            created_by_id=principal.user_id, clan_id=clan_id, limit=settings.list_limit
        )
    else:
        rows = await repo.list_characters(
            clan_id=clan_id, visible_only=not principal.is_admin, limit=settings.list_limit
        )
    return [CharacterSummary.model_validate(c) for c in rows]


@router.post("", response_model=CharacterResponse, status_code=201)
async def create_character(
    body: CharacterCreate,
    principal: Principal = Depends(require_roles(Role.player)),
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    character = await CharacterRepo(session).create(
        created_by_id=principal.user_id, **body.model_dump(exclude_unset=True)
    )
    await session.commit()
    log.info("character_created", character_id=character.id, user_id=principal.user_id)
    return CharacterResponse.model_validate(character)


@router.get("/{character_id}", response_model=CharacterResponse)
async def get_character(
    character_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    character = await CharacterRepo(session).get(character_id)
    if character is None or not _can_read(character, principal):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Character not found")
    return CharacterResponse.model_validate(character)


@router.patch("/{character_id}", response_model=CharacterResponse)
async def update_character(
    character_id: int,
    body: CharacterFields,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    repo = CharacterRepo(session)
    await _load_for_edit(repo, character_id, principal)
    character = await repo.update(character_id, body.model_dump(exclude_unset=True))
    await session.commit()
    return CharacterResponse.model_validate(character)


@router.delete("/{character_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_character(
    character_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> Response:
    repo = CharacterRepo(session)
    await _load_for_edit(repo, character_id, principal)
    await repo.delete(character_id)
    await session.commit()
    log.info("character_deleted", character_id=character_id, user_id=principal.user_id)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.put(
    "/{character_id}/review",
    response_model=CharacterResponse,
    dependencies=[Depends(require_roles(Role.admin))],
)
async def review_character(
    character_id: int,
    body: ReviewRequest,
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    character = await CharacterRepo(session).set_review_state(
        character_id, pending=body.pending, verified=body.verified
    )
    if character is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Character not found")
    await session.commit()
    log.info("character_reviewed", character_id=character_id, verified=body.verified)
    return CharacterResponse.model_validate(character)


@router.post(
    "/{character_id}/abilities",
    response_model=CharacterResponse,
    dependencies=[Depends(require_roles(Role.admin))],
)
async def grant_ability(
    character_id: int,
    body: GrantAbilityRequest,
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    repo = CharacterRepo(session)
    await repo.grant_ability(character_id=character_id, ability_id=body.ability_id)
    await session.commit()
    return CharacterResponse.model_validate(await _reloaded(repo, character_id))


@router.delete(
    "/{character_id}/abilities/{ability_id}",
    response_model=CharacterResponse,
    dependencies=[Depends(require_roles(Role.admin))],
)
async def revoke_ability(
    character_id: int,
    ability_id: int,
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    repo = CharacterRepo(session)
    await repo.revoke_ability(character_id=character_id, ability_id=ability_id)
    await session.commit()
    return CharacterResponse.model_validate(await _reloaded(repo, character_id))


@router.post(
    "/{character_id}/features",
    response_model=CharacterResponse,
    dependencies=[Depends(require_roles(Role.admin))],
)
async def grant_feature(
    character_id: int,
    body: GrantFeatureRequest,
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    repo = CharacterRepo(session)
    await repo.grant_feature(
        character_id=character_id,
        feature_id=body.feature_id,
        description=body.description,
        visible_to_player=body.visible_to_player,
    )
    await session.commit()
    return CharacterResponse.model_validate(await _reloaded(repo, character_id))


@router.delete(
    "/{character_id}/features/{feature_id}",
    response_model=CharacterResponse,
    dependencies=[Depends(require_roles(Role.admin))],
)
async def revoke_feature(
    character_id: int,
    feature_id: int,
    session: AsyncSession = Depends(db_session),
) -> CharacterResponse:
    repo = CharacterRepo(session)
    await repo.revoke_feature(character_id=character_id, feature_id=feature_id)
    await session.commit()
    return CharacterResponse.model_validate(await _reloaded(repo, character_id))


async def _reloaded(repo: CharacterRepo, character_id: int) -> Character:
    character = await repo.get(character_id)
    if character is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Character not found")
    return character
