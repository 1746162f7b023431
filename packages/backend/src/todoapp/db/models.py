"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Relationships, constraints, and indexes defined here.

Key concepts:
- UUID primary keys via the generic sqlalchemy.Uuid type, so the same
  models run on PostgreSQL (production) and SQLite (tests)
- A user's sessions live in their own table (user_tokens), one row per
  issued token. Appending or revoking a session is a single INSERT or
  DELETE, never a read-modify-write of the user row.
- Everything a user owns cascades on delete, so removing an account
  never leaves orphaned tokens or todos behind.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


# ══════════════════════════════════════════════════════════════
# Users and sessions
# ══════════════════════════════════════════════════════════════


class User(Base):
    """An account that owns todos and holds zero or more sessions.

    Learn: password_hash is only ever written by
    CredentialStore.set_password(). Nothing in the ORM layer hashes on
    save, so re-saving a user can never double-hash the password.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    # Relationships
    tokens: Mapped[list["UserToken"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserToken.id",
        passive_deletes=True,
    )
    todos: Mapped[list["Todo"]] = relationship(
        back_populates="creator",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class UserToken(Base):
    """One active session: a signed token plus the scope it was issued for.

    Learn: The autoincrement id doubles as issuance order. There is no
    global token → user lookup; membership is always checked under a
    single user_id.
    """

    __tablename__ = "user_tokens"
    __table_args__ = (
        Index("idx_user_tokens_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    scope: Mapped[str] = mapped_column(String(50), nullable=False)
    token: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    user: Mapped["User"] = relationship(back_populates="tokens")


# ══════════════════════════════════════════════════════════════
# Todos
# ══════════════════════════════════════════════════════════════


class Todo(Base):
    """A todo item. creator_id is set once at creation and never changes."""

    __tablename__ = "todos"
    __table_args__ = (
        Index("idx_todos_creator", "creator_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    creator: Mapped["User"] = relationship(back_populates="todos")
