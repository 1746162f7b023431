"""Token codec — signed session tokens.

Learn: Tokens are HS256 JWTs carrying the user id ("sub") and the scope
the session was issued for. There is deliberately no "exp" claim: a
token stays valid until it is revoked from the session registry.
"iat" and a random "jti" make every issued token distinct, even two
logins by the same user within the same second.

This module only answers "was this token signed by us and is it well
formed?". Whether the session is still active is the registry's job.
"""

import secrets
import time
import uuid
from dataclasses import dataclass
from typing import Optional

import jwt

from todoapp.config import settings
from todoapp.errors import InvalidToken


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    scope: str


def issue_token(
    user_id: uuid.UUID | str,
    scope: str,
    secret: Optional[str] = None,
) -> str:
    """Sign a token binding ``user_id`` to ``scope``."""
    payload = {
        "sub": str(user_id),
        "scope": scope,
        "iat": int(time.time()),
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(
        payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm
    )


def verify_token(token: str, secret: Optional[str] = None) -> TokenPayload:
    """Verify and decode a token.

    Returns the payload on success.
    Raises InvalidToken on a bad signature, a malformed payload,
    or any other decode failure.
    """
    key = secret or settings.jwt_secret
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "scope"]},
        )
    except jwt.InvalidTokenError as e:
        raise InvalidToken(f"Invalid token: {e}")

    user_id = payload.get("sub")
    scope = payload.get("scope")
    if not isinstance(user_id, str) or not isinstance(scope, str):
        raise InvalidToken("Invalid token: malformed payload")

    # base64url leaves spare bits in the last character of each segment,
    # so a token can decode fine after an edit. Only the exact string we
    # would have issued is accepted.
    if jwt.encode(payload, key, algorithm=settings.jwt_algorithm) != token:
        raise InvalidToken("Invalid token: non-canonical encoding")

    return TokenPayload(user_id=user_id, scope=scope)
