"""
vtmsu.db.repositories.auth_adapter

Login-adapter storage operations over the auth tables.

Responsibilities:
- Resolve users by linked provider account.
- Link/unlink provider accounts (composite key: provider + providerAccountId).
- Create, read, extend and delete database sessions.
- Issue and consume one-time verification tokens.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vtmsu.db.models import Account, AccountType, Session, User, VerificationToken


class AuthAdapterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user_by_account(self, *, provider: str, provider_account_id: str) -> User | None:
        stmt = (
            select(User)
            .join(Account, Account.user_id == User.id)
            .where(Account.provider == provider, Account.provider_account_id == provider_account_id)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def link_account(
        self,
        *,
        user_id: str,
        type: AccountType,
        provider: str,
        provider_account_id: str,
        refresh_token: str | None = None,
        access_token: str | None = None,
        expires_at: int | None = None,
        token_type: str | None = None,
        scope: str | None = None,
        id_token: str | None = None,
        session_state: str | None = None,
    ) -> Account:
        # A second link with the same (provider, providerAccountId) fails at flush.
        account = Account(
            user_id=user_id,
            type=type,
            provider=provider,
            provider_account_id=provider_account_id,
            refresh_token=refresh_token,
            access_token=access_token,
            expires_at=expires_at,
            token_type=token_type,
            scope=scope,
            id_token=id_token,
            session_state=session_state,
        )
        self._session.add(account)
        await self._session.flush()
        return account

    async def unlink_account(self, *, provider: str, provider_account_id: str) -> bool:
        stmt = delete(Account).where(
            Account.provider == provider, Account.provider_account_id == provider_account_id
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def create_session(
        self, *, session_token: str, user_id: str, expires: datetime
    ) -> Session:
        sess = Session(session_token=session_token, user_id=user_id, expires=expires)
        self._session.add(sess)
        await self._session.flush()
        return sess

    async def get_session_and_user(self, session_token: str) -> tuple[Session, User] | None:
        stmt = (
            select(Session, User)
            .join(User, User.id == Session.user_id)
            .where(Session.session_token == session_token)
        )
        row = (await self._session.execute(stmt)).first()
        if row is None:
            return None
        return row[0], row[1]

    async def update_session(self, session_token: str, *, expires: datetime) -> Session | None:
        sess = await self._session.get(Session, session_token)
        if sess is None:
            return None
        sess.expires = expires
        await self._session.flush()
        return sess

    async def delete_session(self, session_token: str) -> bool:
        result = await self._session.execute(
            delete(Session).where(Session.session_token == session_token)
        )
        return result.rowcount > 0

    async def create_verification_token(
        self, *, identifier: str, token: str, expires: datetime
    ) -> VerificationToken:
        vt = VerificationToken(identifier=identifier, token=token, expires=expires)
        self._session.add(vt)
        await self._session.flush()
        return vt

    async def use_verification_token(
        self, *, identifier: str, token: str
    ) -> VerificationToken | None:
        # One-time use: the row is removed even when already expired; callers check `expires`.
        vt = await self._session.get(VerificationToken, (identifier, token))
        if vt is None:
            return None
        await self._session.delete(vt)
        await self._session.flush()
        return vt


# --- Module Notes -----------------------------------------------------------
# The HTTP login flow itself (OAuth redirects, cookies) is out of scope here; this
# repository only covers the storage contract of the auth tables.
