from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from vtmsu.db.models import Post


class PostRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, created_by_id: str, name: str, content: str | None = None) -> Post:
        post = Post(created_by_id=created_by_id, name=name, content=content)
        self._session.add(post)
        await self._session.flush()
        await self._session.refresh(post)
        return post

    async def latest(self) -> Post | None:
        stmt = select(Post).order_by(desc(Post.created_at), desc(Post.id)).limit(1)
        return (await self._session.execute(stmt)).scalar_one_or_none()
