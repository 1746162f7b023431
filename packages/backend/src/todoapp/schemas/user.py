"""Pydantic schemas for users and sessions.

Learn: UserRead is the only shape a user is ever returned in. It has
no password_hash and no tokens; the session token travels in the
x-auth response header, never in a body.

Credentials are optional plain strings here. Presence, email format and
password length are checked by the credential store so that signup
failures come back as 400, like every other signup/login failure.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Credentials(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class UserRead(BaseModel):
    id: uuid.UUID
    email: str

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    """One active session. The token itself is never listed."""
    id: int
    scope: str
    created_at: datetime
    current: bool = False

    model_config = {"from_attributes": True}


class SessionList(BaseModel):
    sessions: list[SessionRead]
