from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT, HTTP_404_NOT_FOUND

from vtmsu.api.deps import db_session
from vtmsu.api.routers.hunts import HuntResponse
from vtmsu.auth.deps import get_principal, require_roles
from vtmsu.auth.models import Role
from vtmsu.db.repositories.hunting import HuntingRepo
from vtmsu.db.repositories.hunts import HuntRepo
from vtmsu.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(
    prefix="/v1/hunting",
    tags=["hunting"],
    dependencies=[Depends(get_principal)],
)

_admin = [Depends(require_roles(Role.admin))]


class GroundFields(BaseModel):
    name: str | None = Field(default=None, max_length=256)
    radius: int | None = Field(default=None, ge=0)
    max_inst: int | None = Field(default=None, ge=0)
    min_inst: int | None = Field(default=None, ge=0)
    delay: int | None = Field(default=None, ge=0)
    coord_x: float | None = None
    coord_y: float | None = None
    content: str | None = None


class GroundResponse(GroundFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime | None


class DescriptionIn(BaseModel):
    content: str
    remains: int | None = None


class DescriptionResponse(DescriptionIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    target_id: int
    content: str | None


class TargetCreate(BaseModel):
    name: str | None = Field(default=None, max_length=256)
    image: str | None = Field(default=None, max_length=255)
    hunt_req: str | None = Field(default=None, max_length=255)
    descriptions: list[DescriptionIn] = Field(default_factory=list)


class TargetSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    image: str | None
    hunt_req: str | None


class TargetResponse(TargetSummary):
    descriptions: list[DescriptionResponse]


class InstanceCreate(BaseModel):
    target_id: int
    ground_id: int | None = None
    coord_x: float | None = None
    coord_y: float | None = None
    remains: int | None = None
    temporary: bool = False
    expires: datetime | None = None

    @field_validator("expires")
    @classmethod
    def _expires_utc(cls, v: datetime | None) -> datetime | None:
        # Naive timestamps are taken as UTC; everything is stored in UTC.
        if v is None:
            return None
        if v.tzinfo is None:
            v = v.replace(tzinfo=UTC)
        return v.astimezone(UTC)


class InstanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    target_id: int
    ground_id: int | None
    coord_x: float | None
    coord_y: float | None
    remains: int | None
    temporary: bool | None
    expires: datetime | None
    created_at: datetime


class ActiveInstanceResponse(InstanceResponse):
    target: TargetSummary


# Grounds


@router.get("/grounds", response_model=list[GroundResponse])
async def list_grounds(session: AsyncSession = Depends(db_session)) -> list[GroundResponse]:
    return [GroundResponse.model_validate(g) for g in await HuntingRepo(session).list_grounds()]


@router.post("/grounds", response_model=GroundResponse, status_code=201, dependencies=_admin)
async def create_ground(
    body: GroundFields, session: AsyncSession = Depends(db_session)
) -> GroundResponse:
    ground = await HuntingRepo(session).create_ground(**body.model_dump(exclude_unset=True))
    await session.commit()
    return GroundResponse.model_validate(ground)


@router.patch("/grounds/{ground_id}", response_model=GroundResponse, dependencies=_admin)
async def update_ground(
    ground_id: int, body: GroundFields, session: AsyncSession = Depends(db_session)
) -> GroundResponse:
    ground = await HuntingRepo(session).update_ground(
        ground_id, body.model_dump(exclude_unset=True)
    )
    if ground is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Hunting ground not found")
    await session.commit()
    return GroundResponse.model_validate(ground)


@router.delete("/grounds/{ground_id}", status_code=HTTP_204_NO_CONTENT, dependencies=_admin)
async def delete_ground(ground_id: int, session: AsyncSession = Depends(db_session)) -> Response:
    if not await HuntingRepo(session).delete_ground(ground_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Hunting ground not found")
    await session.commit()
    return Response(status_code=HTTP_204_NO_CONTENT)


# Targets


@router.get("/targets", response_model=list[TargetSummary])
async def list_targets(session: AsyncSession = Depends(db_session)) -> list[TargetSummary]:
    return [TargetSummary.model_validate(t) for t in await HuntingRepo(session).list_targets()]


@router.post("/targets", response_model=TargetResponse, status_code=201, dependencies=_admin)
async def create_target(
    body: TargetCreate, session: AsyncSession = Depends(db_session)
) -> TargetResponse:
    target = await HuntingRepo(session).create_target(
        name=body.name,
        image=body.image,
        hunt_req=body.hunt_req,
        descriptions=[(d.remains, d.content) for d in body.descriptions],
    )
    await session.commit()
    return TargetResponse.model_validate(target)


@router.get("/targets/{target_id}", response_model=TargetResponse)
async def get_target(target_id: int, session: AsyncSession = Depends(db_session)) -> TargetResponse:
    target = await HuntingRepo(session).get_target(target_id)
    if target is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Hunting target not found")
    return TargetResponse.model_validate(target)


@router.post(
    "/targets/{target_id}/descriptions",
    response_model=DescriptionResponse,
    status_code=201,
    dependencies=_admin,
)
async def add_description(
    target_id: int, body: DescriptionIn, session: AsyncSession = Depends(db_session)
) -> DescriptionResponse:
    desc = await HuntingRepo(session).add_description(
        target_id=target_id, content=body.content, remains=body.remains
    )
    await session.commit()
    return DescriptionResponse.model_validate(desc)


@router.delete("/targets/{target_id}", status_code=HTTP_204_NO_CONTENT, dependencies=_admin)
async def delete_target(target_id: int, session: AsyncSession = Depends(db_session)) -> Response:
    if not await HuntingRepo(session).delete_target(target_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Hunting target not found")
    await session.commit()
    return Response(status_code=HTTP_204_NO_CONTENT)


# Instances


@router.get("/instances", response_model=list[ActiveInstanceResponse])
async def list_active_instances(
    ground_id: int | None = None, session: AsyncSession = Depends(db_session)
) -> list[ActiveInstanceResponse]:
    rows = await HuntingRepo(session).active_instances(at=datetime.now(tz=UTC), ground_id=ground_id)
    return [ActiveInstanceResponse.model_validate(i) for i in rows]


@router.post("/instances", response_model=InstanceResponse, status_code=201, dependencies=_admin)
async def spawn_instance(
    body: InstanceCreate, session: AsyncSession = Depends(db_session)
) -> InstanceResponse:
    inst = await HuntingRepo(session).spawn_instance(**body.model_dump())
    await session.commit()
    log.info("instance_spawned", instance_id=inst.id, target_id=inst.target_id)
    return InstanceResponse.model_validate(inst)


@router.post("/instances/purge", dependencies=_admin)
async def purge_expired_instances(session: AsyncSession = Depends(db_session)) -> dict[str, int]:
    deleted = await HuntingRepo(session).purge_expired(at=datetime.now(tz=UTC))
    await session.commit()
    log.info("instances_purged", deleted=deleted)
    return {"deleted": deleted}


@router.get(
    "/instances/{instance_id}/hunts", response_model=list[HuntResponse], dependencies=_admin
)
async def list_instance_hunts(
    instance_id: int, session: AsyncSession = Depends(db_session)
) -> list[HuntResponse]:
    if await HuntingRepo(session).get_instance(instance_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Hunting instance not found")
    hunts = await HuntRepo(session).list_for_instance(instance_id)
    return [HuntResponse.model_validate(h) for h in hunts]
