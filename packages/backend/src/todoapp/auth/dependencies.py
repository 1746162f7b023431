"""FastAPI auth dependencies.

Learn: get_auth_context is used as Depends() by every protected route.
It reads the token from the configured header (x-auth by default),
hands it to the session registry, and returns an AuthContext that the
handler receives as a plain argument.

A request without the header is rejected before the registry, the
database, or the handler is touched.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from todoapp.config import settings
from todoapp.db.engine import get_db
from todoapp.errors import Unauthorized
from todoapp.services.session_registry import AuthContext, SessionRegistry

__all__ = ["AuthContext", "get_auth_context"]


async def get_auth_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Extract and validate the session token (required, 401 if absent)."""
    token = request.headers.get(settings.auth_header)
    if not token:
        raise Unauthorized()

    registry = SessionRegistry(db)
    return await registry.authenticate(token, scope=settings.auth_scope)
