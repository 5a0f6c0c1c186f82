from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT, HTTP_404_NOT_FOUND

from vtmsu.api.deps import db_session
from vtmsu.auth.deps import require_roles
from vtmsu.auth.models import Principal, Role
from vtmsu.db.repositories.rules import RuleRepo

router = APIRouter(prefix="/v1/rules", tags=["rules"])


class RuleFields(BaseModel):
    name: str | None = Field(default=None, max_length=256)
    link: str | None = Field(default=None, max_length=255)
    category_id: int | None = None
    ordered_as: int | None = None
    content: str | None = None


class RuleResponse(RuleFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_by_id: str
    created_at: datetime
    updated_at: datetime | None


# Rules are public reading material.
@router.get("", response_model=list[RuleResponse])
async def list_rules(
    category_id: int | None = None, session: AsyncSession = Depends(db_session)
) -> list[RuleResponse]:
    rows = await RuleRepo(session).list_ordered(category_id=category_id)
    return [RuleResponse.model_validate(r) for r in rows]


@router.post("", response_model=RuleResponse, status_code=201)
async def create_rule(
    body: RuleFields,
    principal: Principal = Depends(require_roles(Role.admin)),
    session: AsyncSession = Depends(db_session),
) -> RuleResponse:
    rule = await RuleRepo(session).create(created_by_id=principal.user_id, **body.model_dump())
    await session.commit()
    return RuleResponse.model_validate(rule)


@router.patch(
    "/{rule_id}", response_model=RuleResponse, dependencies=[Depends(require_roles(Role.admin))]
)
async def update_rule(
    rule_id: int, body: RuleFields, session: AsyncSession = Depends(db_session)
) -> RuleResponse:
    rule = await RuleRepo(session).update(rule_id, body.model_dump(exclude_unset=True))
    if rule is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Rule not found")
    await session.commit()
    return RuleResponse.model_validate(rule)


@router.delete(
    "/{rule_id}",
    status_code=HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(Role.admin))],
)
async def delete_rule(rule_id: int, session: AsyncSession = Depends(db_session)) -> Response:
    if not await RuleRepo(session).delete(rule_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Rule not found")
    await session.commit()
    return Response(status_code=HTTP_204_NO_CONTENT)
