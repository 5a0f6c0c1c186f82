from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from vtmsu.api.deps import db_session, settings_dep
from vtmsu.auth.jwt import JwtConfig, issue_token
from vtmsu.db.repositories.users import UserRepo
from vtmsu.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=255)
    roles: list[str] = Field(default_factory=list)
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class DevUserRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    name: str | None = Field(default=None, max_length=255)


class DevUserResponse(BaseModel):
    id: str
    email: str
    name: str | None


def _dev_only(settings: Settings) -> None:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    _dev_only(settings)
    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        user_id=body.user_id,
        roles=body.roles,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(access_token=token)


@router.post("/users", response_model=DevUserResponse, status_code=201)
async def create_dev_user(
    body: DevUserRequest,
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> DevUserResponse:
    # Stand-in for the OAuth sign-up flow on local setups.
    _dev_only(settings)
    user = await UserRepo(session).create(email=body.email, name=body.name)
    await session.commit()
    return DevUserResponse(id=user.id, email=user.email, name=user.name)
