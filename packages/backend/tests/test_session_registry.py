"""Session registry tests — issue, authenticate, revoke.

Learn: The key property here is that a token can be perfectly valid
as far as the codec is concerned and still be rejected, because its
session was revoked.
"""

import asyncio
import uuid

import pytest

from todoapp.auth.jwt import issue_token, verify_token
from todoapp.errors import Unauthorized
from todoapp.services.credential_store import CredentialStore
from todoapp.services.session_registry import SessionRegistry


@pytest.fixture
async def user(db_session):
    return await CredentialStore(db_session).create("session@x.com", "pw12345")


@pytest.mark.asyncio
async def test_issued_token_authenticates(db_session, user):
    registry = SessionRegistry(db_session)
    token = await registry.issue_session(user)

    ctx = await registry.authenticate(token)
    assert ctx.user.id == user.id
    assert ctx.token == token


@pytest.mark.asyncio
async def test_revoked_token_is_rejected_though_signature_is_valid(db_session, user):
    registry = SessionRegistry(db_session)
    token = await registry.issue_session(user)

    await registry.revoke(user, token)

    assert verify_token(token).user_id == str(user.id)
    with pytest.raises(Unauthorized):
        await registry.authenticate(token)


@pytest.mark.asyncio
async def test_revoke_is_idempotent_and_only_removes_one_session(db_session, user):
    registry = SessionRegistry(db_session)
    phone = await registry.issue_session(user)
    laptop = await registry.issue_session(user)

    await registry.revoke(user, phone)
    await registry.revoke(user, phone)

    sessions = await registry.list_sessions(user)
    assert [s.token for s in sessions] == [laptop]
    assert (await registry.authenticate(laptop)).user.id == user.id


@pytest.mark.asyncio
async def test_sessions_listed_in_issuance_order(db_session, user):
    registry = SessionRegistry(db_session)
    tokens = [await registry.issue_session(user) for _ in range(3)]

    sessions = await registry.list_sessions(user)
    assert [s.token for s in sessions] == tokens
    assert all(s.scope == "auth" for s in sessions)


@pytest.mark.asyncio
async def test_signed_but_never_registered_token_is_rejected(db_session, user):
    token = issue_token(user.id, "auth")
    with pytest.raises(Unauthorized):
        await SessionRegistry(db_session).authenticate(token)


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_rejected(db_session):
    token = issue_token(uuid.uuid4(), "auth")
    with pytest.raises(Unauthorized):
        await SessionRegistry(db_session).authenticate(token)


@pytest.mark.asyncio
async def test_garbage_token_is_unauthorized(db_session):
    with pytest.raises(Unauthorized):
        await SessionRegistry(db_session).authenticate("garbage")


@pytest.mark.asyncio
async def test_scope_must_match(db_session, user):
    registry = SessionRegistry(db_session)
    token = await registry.issue_session(user, scope="export")

    assert (await registry.authenticate(token)).user.id == user.id
    with pytest.raises(Unauthorized):
        await registry.authenticate(token, scope="auth")


@pytest.mark.asyncio
async def test_another_users_token_cannot_be_revoked(db_session, user):
    registry = SessionRegistry(db_session)
    other = await CredentialStore(db_session).create("other@x.com", "pw12345")
    token = await registry.issue_session(user)

    await registry.revoke(other, token)

    assert (await registry.authenticate(token)).user.id == user.id


@pytest.mark.asyncio
async def test_concurrent_logins_keep_every_token(session_factory, db_session, user):
    """Two logins racing for the same user both end up registered."""

    async def login():
        async with session_factory() as session:
            return await SessionRegistry(session).issue_session(user)

    results = await asyncio.gather(*(login() for _ in range(5)))

    assert len(set(results)) == 5
    sessions = await SessionRegistry(db_session).list_sessions(user)
    assert sorted(s.token for s in sessions) == sorted(results)
