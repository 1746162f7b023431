"""Credential store — user accounts and password verification.

Learn: This service owns every write to User.email and User.password_hash.
Hashing is an explicit step (set_password) called exactly once per
plaintext password: on signup and on password change. There is no
"hash on save" hook, so re-saving a user can never re-hash a hash.

Login failures are deliberately uniform: an unknown email and a wrong
password both raise InvalidCredentials, and both pay for one bcrypt
check, so neither the message nor the timing tells them apart.
"""

import re
import uuid
from functools import lru_cache
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from todoapp.auth.password import hash_password, verify_password
from todoapp.config import settings
from todoapp.db.models import User
from todoapp.errors import DuplicateEmail, InvalidCredentials, NotFound, ValidationError

logger = structlog.get_logger()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """Hash checked against when the email is unknown."""
    return hash_password("not-a-real-password", rounds=settings.bcrypt_rounds)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip()


def validate_email(email: str) -> None:
    if not email or not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email address")


def validate_password(password: Optional[str]) -> None:
    if not password:
        raise ValidationError("Password is required")
    if len(password) < settings.password_min_length:
        raise ValidationError(
            f"Password must be at least {settings.password_min_length} characters"
        )


class CredentialStore:
    """User identity records and password hashing/verification."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create(
        self, email: Optional[str], password: Optional[str], commit: bool = True
    ) -> User:
        """Create a user account.

        With ``commit=False`` the row is only flushed, so the caller can
        add the first session in the same transaction and commit both.

        Raises:
            ValidationError: malformed email or unacceptable password
            DuplicateEmail: the email is already registered
        """
        email = normalize_email(email)
        validate_email(email)
        validate_password(password)

        if await self.find_by_email(email) is not None:
            raise DuplicateEmail()

        user = User(email=email)
        self.set_password(user, password)
        self.db.add(user)
        try:
            if commit:
                await self.db.commit()
            else:
                await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await self.db.rollback()
            raise DuplicateEmail()

        logger.info("users.created", user_id=str(user.id))
        return user

    def set_password(self, user: User, password: str) -> None:
        """The single place a plaintext password becomes a hash."""
        user.password_hash = hash_password(password, rounds=settings.bcrypt_rounds)

    # ─── Read ────────────────────────────────────────────

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    async def find_by_id(self, user_id: uuid.UUID | str) -> User:
        """Load a user by id. Raises NotFound for unknown or malformed ids."""
        try:
            uid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            raise NotFound("User not found")

        user = await self.db.get(User, uid)
        if user is None:
            raise NotFound("User not found")
        return user

    # ─── Verify ──────────────────────────────────────────

    async def verify_credentials(self, email: str, password: str) -> User:
        """Return the user for a matching email/password pair.

        Raises InvalidCredentials for an unknown email or a wrong password.
        """
        user = await self.find_by_email(email)
        if user is None:
            verify_password(password or "", _dummy_hash())
            logger.info("users.login_failed")
            raise InvalidCredentials()

        if not verify_password(password or "", user.password_hash):
            logger.info("users.login_failed", user_id=str(user.id))
            raise InvalidCredentials()

        return user

    # ─── Update ──────────────────────────────────────────

    async def change_password(
        self, user: User, current_password: str, new_password: str
    ) -> User:
        """Replace a user's password after checking the current one.

        Existing sessions stay active.
        """
        if not verify_password(current_password or "", user.password_hash):
            raise InvalidCredentials()
        validate_password(new_password)

        self.set_password(user, new_password)
        await self.db.commit()
        logger.info("users.password_changed", user_id=str(user.id))
        return user
