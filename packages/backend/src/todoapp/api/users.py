"""Users API — signup, login, logout, profile.

Learn: Routes for the account and session lifecycle:
- POST /users → create an account, start a session
- POST /users/login → email/password → new session
- GET /users/me → current user
- DELETE /users/me/token → revoke the token used for this request
- PATCH /users/me/password → change password
- GET /users/me/sessions → active sessions (never the tokens themselves)

The session token is returned in the x-auth response header, never in
the JSON body. Signup and login failures are all 400; a client can't
tell "no such email" from "wrong password".
"""

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from todoapp.auth.dependencies import AuthContext, get_auth_context
from todoapp.config import settings
from todoapp.db.engine import get_db
from todoapp.schemas.user import (
    Credentials,
    PasswordChange,
    SessionList,
    SessionRead,
    UserRead,
)
from todoapp.services.credential_store import CredentialStore
from todoapp.services.session_registry import SessionRegistry

logger = structlog.get_logger()

router = APIRouter(prefix="/users")


def _credentials(db: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def _sessions(db: AsyncSession = Depends(get_db)) -> SessionRegistry:
    return SessionRegistry(db)


# ─── Signup ─────────────────────────────────────────────


@router.post("", response_model=UserRead)
async def signup(
    body: Credentials,
    response: Response,
    credentials: CredentialStore = Depends(_credentials),
    sessions: SessionRegistry = Depends(_sessions),
):
    """Create an account and return its first session token.

    The user row and its first token are committed together: if the
    session can't be issued, no account is left behind.
    """
    user = await credentials.create(body.email, body.password, commit=False)
    token = await sessions.issue_session(user)
    response.headers[settings.auth_header] = token
    return user


# ─── Login ──────────────────────────────────────────────


@router.post("/login", response_model=UserRead)
async def login(
    body: Credentials,
    response: Response,
    credentials: CredentialStore = Depends(_credentials),
    sessions: SessionRegistry = Depends(_sessions),
):
    """Login with email and password → new session token."""
    user = await credentials.verify_credentials(body.email, body.password)
    token = await sessions.issue_session(user)
    response.headers[settings.auth_header] = token
    logger.info("users.login", user_id=str(user.id))
    return user


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(ctx: AuthContext = Depends(get_auth_context)):
    """Get the current authenticated user's info."""
    return ctx.user


@router.delete("/me/token")
async def logout(
    ctx: AuthContext = Depends(get_auth_context),
    sessions: SessionRegistry = Depends(_sessions),
):
    """Revoke the token this request was made with."""
    await sessions.revoke(ctx.user, ctx.token)
    return {"revoked": True}


@router.patch("/me/password", response_model=UserRead)
async def change_password(
    body: PasswordChange,
    ctx: AuthContext = Depends(get_auth_context),
    credentials: CredentialStore = Depends(_credentials),
):
    """Change the current user's password. Other sessions stay active."""
    return await credentials.change_password(
        ctx.user, body.current_password, body.new_password
    )


@router.get("/me/sessions", response_model=SessionList)
async def list_sessions(
    ctx: AuthContext = Depends(get_auth_context),
    sessions: SessionRegistry = Depends(_sessions),
):
    """List the current user's active sessions, oldest first."""
    rows = await sessions.list_sessions(ctx.user)
    return {
        "sessions": [
            SessionRead(
                id=row.id,
                scope=row.scope,
                created_at=row.created_at,
                current=row.token == ctx.token,
            )
            for row in rows
        ]
    }
