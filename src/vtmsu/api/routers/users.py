from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from vtmsu.api.deps import db_session
from vtmsu.auth.deps import get_principal
from vtmsu.auth.models import Principal
from vtmsu.db.repositories.users import UserRepo

router = APIRouter(prefix="/v1/users", tags=["users"])


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str | None
    email: str
    email_verified: datetime | None
    image: str | None


@router.get("/me", response_model=UserResponse)
async def get_me(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> UserResponse:
    user = await UserRepo(session).get(principal.user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)
