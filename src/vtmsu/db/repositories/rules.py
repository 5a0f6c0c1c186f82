"""
vtmsu.db.repositories.rules

Repository for `Rule` documentation entries.

Responsibilities:
- Create, list (category + explicit order), patch and delete rules.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vtmsu.db.models import Rule
from vtmsu.db.repositories.common import apply_changes


class RuleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        created_by_id: str,
        name: str | None = None,
        link: str | None = None,
        category_id: int | None = None,
        ordered_as: int | None = None,
        content: str | None = None,
    ) -> Rule:
        rule = Rule(
            created_by_id=created_by_id,
            name=name,
            link=link,
            category_id=category_id,
            ordered_as=ordered_as,
            content=content,
        )
        self._session.add(rule)
        await self._session.flush()
        await self._session.refresh(rule)
        return rule

    async def get(self, rule_id: int) -> Rule | None:
        return await self._session.get(Rule, rule_id)

    async def list_ordered(self, *, category_id: int | None = None) -> list[Rule]:
        # NULL orderedAs sorts after explicitly ordered entries.
        stmt = select(Rule).order_by(
            Rule.category_id,
            Rule.ordered_as.is_(None),
            Rule.ordered_as,
            Rule.id,
        )
        if category_id is not None:
            stmt = stmt.where(Rule.category_id == category_id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, rule_id: int, changes: dict[str, Any]) -> Rule | None:
        rule = await self._session.get(Rule, rule_id)
        if rule is None:
            return None
        apply_changes(rule, changes)
        await self._session.flush()
        await self._session.refresh(rule)
        return rule

    async def delete(self, rule_id: int) -> bool:
        result = await self._session.execute(delete(Rule).where(Rule.id == rule_id))
        return result.rowcount > 0
