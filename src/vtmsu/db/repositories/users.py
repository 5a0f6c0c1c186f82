"""
vtmsu.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Create, fetch, patch and delete users.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vtmsu.db.models import User
from vtmsu.db.repositories.common import apply_changes


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        email: str,
        name: str | None = None,
        image: str | None = None,
        email_verified: datetime | None = None,
        user_id: str | None = None,
    ) -> User:
        user = User(email=email, name=name, image=image)
        if user_id is not None:
            user.id = user_id
        if email_verified is not None:
            user.email_verified = email_verified
        self._session.add(user)
        await self._session.flush()
        # Load server-side defaults (emailVerified).
        await self._session.refresh(user)
        return user

    async def get(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalars().first()

    async def update(self, user_id: str, changes: dict[str, Any]) -> User | None:
        user = await self._session.get(User, user_id)
        if user is None:
            return None
        apply_changes(user, changes)
        await self._session.flush()
        return user

    async def delete(self, user_id: str) -> bool:
        # Accounts and sessions cascade; authored rows make this fail with IntegrityError.
        result = await self._session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0
