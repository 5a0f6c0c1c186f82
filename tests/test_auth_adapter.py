"""
tests.test_auth_adapter

Storage contract of the login adapter (accounts, sessions, verification tokens).
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from vtmsu.db.models import AccountType
from vtmsu.db.repositories.auth_adapter import AuthAdapterRepo


@pytest.mark.asyncio
async def test_link_resolve_and_unlink_account(session, user):
    adapter = AuthAdapterRepo(session)
    await adapter.link_account(
        user_id=user.id,
        type=AccountType.oauth,
        provider="discord",
        provider_account_id="1001",
        access_token="at",
        expires_at=1_700_000_000,
    )
    await session.commit()

    found = await adapter.get_user_by_account(provider="discord", provider_account_id="1001")
    assert found is not None and found.id == user.id
    assert await adapter.get_user_by_account(provider="google", provider_account_id="1001") is None

    assert await adapter.unlink_account(provider="discord", provider_account_id="1001") is True
    assert await adapter.unlink_account(provider="discord", provider_account_id="1001") is False


@pytest.mark.asyncio
async def test_session_lifecycle(session, user):
    adapter = AuthAdapterRepo(session)
    expires = datetime.now(tz=UTC) + timedelta(days=30)
    await adapter.create_session(session_token="tok", user_id=user.id, expires=expires)
    await session.commit()

    pair = await adapter.get_session_and_user("tok")
    assert pair is not None
    sess, owner = pair
    assert sess.session_token == "tok"
    assert owner.id == user.id

    later = expires + timedelta(days=1)
    updated = await adapter.update_session("tok", expires=later)
    assert updated is not None and updated.expires == later
    assert await adapter.update_session("missing", expires=later) is None

    assert await adapter.delete_session("tok") is True
    await session.commit()
    assert await adapter.get_session_and_user("tok") is None


@pytest.mark.asyncio
async def test_verification_token_is_single_use(session):
    adapter = AuthAdapterRepo(session)
    await adapter.create_verification_token(
        identifier="x@example.org", token="abc", expires=datetime.now(tz=UTC) + timedelta(hours=1)
    )
    await session.commit()

    used = await adapter.use_verification_token(identifier="x@example.org", token="abc")
    assert used is not None and used.token == "abc"
    await session.commit()
    assert await adapter.use_verification_token(identifier="x@example.org", token="abc") is None
