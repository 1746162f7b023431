"""Session registry — the per-user list of currently valid tokens.

Learn: A token is accepted only if BOTH checks pass:
1. Its signature and payload verify (todoapp.auth.jwt)
2. The exact (token, scope) pair is still registered for that user

The second check is what makes logout work: a correctly signed token is
rejected as soon as its row is deleted.

Issuing and revoking are single INSERT / DELETE statements against
user_tokens. Two concurrent logins for the same user each add their own
row; neither can overwrite the other's.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from todoapp.auth.jwt import issue_token, verify_token
from todoapp.config import settings
from todoapp.db.models import User, UserToken, utcnow
from todoapp.errors import InvalidToken, NotFound, Unauthorized
from todoapp.services.credential_store import CredentialStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthContext:
    """The authenticated user and the token they presented.

    Passed explicitly to every protected handler; nothing is stashed on
    the request object.
    """

    user: User
    token: str


class SessionRegistry:
    """Issue, check, and revoke session tokens."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.credentials = CredentialStore(db)

    async def issue_session(self, user: User, scope: Optional[str] = None) -> str:
        """Sign a new token for ``user`` and register it. Returns the token."""
        scope = scope or settings.auth_scope
        token = issue_token(user.id, scope)

        await self.db.execute(
            insert(UserToken).values(
                user_id=user.id,
                scope=scope,
                token=token,
                created_at=utcnow(),
            )
        )
        await self.db.commit()

        logger.info("sessions.issued", user_id=str(user.id), scope=scope)
        return token

    async def authenticate(
        self, token: str, scope: Optional[str] = None
    ) -> AuthContext:
        """Resolve a presented token to its user.

        If ``scope`` is given the token must have been issued for it.
        Raises Unauthorized when the token is invalid, its user is gone,
        or the session has been revoked.
        """
        try:
            payload = verify_token(token)
        except InvalidToken as e:
            logger.info("sessions.rejected", reason="invalid_token")
            raise Unauthorized() from e

        if scope is not None and payload.scope != scope:
            logger.info("sessions.rejected", reason="wrong_scope")
            raise Unauthorized()

        try:
            user = await self.credentials.find_by_id(payload.user_id)
        except NotFound as e:
            logger.info("sessions.rejected", reason="unknown_user")
            raise Unauthorized() from e

        q = (
            select(UserToken.id)
            .where(
                UserToken.user_id == user.id,
                UserToken.token == token,
                UserToken.scope == payload.scope,
            )
            .limit(1)
        )
        result = await self.db.execute(q)
        if result.first() is None:
            logger.info("sessions.rejected", reason="revoked", user_id=str(user.id))
            raise Unauthorized()

        return AuthContext(user=user, token=token)

    async def revoke(self, user: User, token: str) -> None:
        """Remove ``token`` from the user's sessions. No-op if already gone."""
        result = await self.db.execute(
            delete(UserToken).where(
                UserToken.user_id == user.id,
                UserToken.token == token,
            )
        )
        await self.db.commit()
        logger.info("sessions.revoked", user_id=str(user.id), removed=result.rowcount)

    async def list_sessions(self, user: User) -> list[UserToken]:
        """The user's active sessions in issuance order."""
        result = await self.db.execute(
            select(UserToken)
            .where(UserToken.user_id == user.id)
            .order_by(UserToken.id)
        )
        return list(result.scalars().all())
