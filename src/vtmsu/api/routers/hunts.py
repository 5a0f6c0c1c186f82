"""
vtmsu.api.routers.hunts

Hunt log endpoints.

Responsibilities:
- Record the outcome of a character's hunt.
- Return a character's hunt history (newest first).
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from vtmsu.api.deps import db_session, settings_dep
from vtmsu.auth.deps import get_principal, require_roles
from vtmsu.auth.models import Principal, Role
from vtmsu.db.models import HuntStatus
from vtmsu.db.repositories.characters import CharacterRepo
from vtmsu.db.repositories.hunting import HuntingRepo
from vtmsu.db.repositories.hunts import HuntRepo
from vtmsu.observability.logging import get_logger
from vtmsu.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1/hunts", tags=["hunts"])


class HuntCreate(BaseModel):
    character_id: int
    status: HuntStatus
    instance_id: int | None = None


class HuntResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    character_id: int
    instance_id: int | None
    created_by_id: str
    status: HuntStatus
    created_at: datetime
    updated_at: datetime | None


async def _require_own_character(
    session: AsyncSession, character_id: int, principal: Principal
) -> None:
    character = await CharacterRepo(session).get(character_id)
    if character is None or (
        character.created_by_id != principal.user_id and not principal.is_admin
    ):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Character not found")


@router.post("", response_model=HuntResponse, status_code=201)
async def record_hunt(
    body: HuntCreate,
    principal: Principal = Depends(require_roles(Role.player)),
    session: AsyncSession = Depends(db_session),
) -> HuntResponse:
    await _require_own_character(session, body.character_id, principal)
    if body.instance_id is not None and await HuntingRepo(session).get_instance(
        body.instance_id
    ) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Hunting instance not found")

    hunt = await HuntRepo(session).record(
        character_id=body.character_id,
        created_by_id=principal.user_id,
        status=body.status,
        instance_id=body.instance_id,
    )
    await session.commit()
    log.info(
        "hunt_recorded",
        hunt_id=hunt.id,
        character_id=body.character_id,
        status=body.status.value,
    )
    return HuntResponse.model_validate(hunt)


@router.get("", response_model=list[HuntResponse])
async def list_hunts(
    character_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> list[HuntResponse]:
    await _require_own_character(session, character_id, principal)
    hunts = await HuntRepo(session).list_for_character(character_id, limit=settings.list_limit)
    return [HuntResponse.model_validate(h) for h in hunts]
