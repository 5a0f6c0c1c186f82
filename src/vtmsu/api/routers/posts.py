from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from vtmsu.api.deps import db_session
from vtmsu.auth.deps import get_principal
from vtmsu.auth.models import Principal
from vtmsu.db.repositories.posts import PostRepo

router = APIRouter(prefix="/v1/posts", tags=["posts"])


class PostCreate(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    content: str | None = None


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    content: str | None
    created_by_id: str
    created_at: datetime


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    body: PostCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> PostResponse:
    post = await PostRepo(session).create(
        created_by_id=principal.user_id, name=body.name, content=body.content
    )
    await session.commit()
    return PostResponse.model_validate(post)


@router.get("/latest", response_model=PostResponse | None)
async def latest_post(session: AsyncSession = Depends(db_session)) -> PostResponse | None:
    post = await PostRepo(session).latest()
    return PostResponse.model_validate(post) if post is not None else None
