"""Todo service — CRUD scoped to the authenticated owner.

Learn: A TodoService is always bound to one owner. Every query it runs
starts from _owned(), which filters on creator_id, so there is no code
path that can reach another user's todo. A todo that exists but belongs
to someone else looks exactly like one that doesn't exist: NotFound.

Completion is normalized on every write: completed=True stamps
completed_at with the current time; anything else (False, null, a
string, missing) resets completed to False and clears completed_at.
"""

import uuid
from typing import Any, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from todoapp.db.models import Todo, utcnow
from todoapp.errors import NotFound, ValidationError


def apply_completion(todo: Todo, completed: Any) -> None:
    """Set completed/completed_at from a client-supplied value."""
    if completed is True:
        todo.completed = True
        todo.completed_at = utcnow()
    else:
        todo.completed = False
        todo.completed_at = None


def clean_text(text: Any) -> str:
    """Trimmed todo text. Blank or non-string text is a ValidationError."""
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Todo text is required")
    return text.strip()


def parse_todo_id(todo_id: uuid.UUID | str) -> uuid.UUID:
    if isinstance(todo_id, uuid.UUID):
        return todo_id
    try:
        return uuid.UUID(str(todo_id))
    except ValueError:
        raise NotFound("Todo not found")


class TodoService:
    """Business logic for todos owned by ``owner_id``."""

    def __init__(self, db: AsyncSession, owner_id: uuid.UUID):
        self.db = db
        self.owner_id = owner_id

    def _owned(self) -> Select:
        return select(Todo).where(Todo.creator_id == self.owner_id)

    # ─── Create ──────────────────────────────────────────

    async def create_todo(self, text: str, completed: Any = False) -> Todo:
        """Create a todo owned by the current user."""
        todo = Todo(text=clean_text(text), creator_id=self.owner_id)
        apply_completion(todo, completed)
        self.db.add(todo)
        await self.db.commit()
        return todo

    # ─── Read ────────────────────────────────────────────

    async def get_todo(self, todo_id: uuid.UUID | str) -> Todo:
        """Load one of the owner's todos. Raises NotFound otherwise."""
        tid = parse_todo_id(todo_id)
        result = await self.db.execute(self._owned().where(Todo.id == tid))
        todo = result.scalars().first()
        if todo is None:
            raise NotFound("Todo not found")
        return todo

    async def list_todos(self) -> list[Todo]:
        result = await self.db.execute(
            self._owned().order_by(Todo.created_at, Todo.id)
        )
        return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update_todo(
        self,
        todo_id: uuid.UUID | str,
        text: Optional[str] = None,
        completed: Any = None,
    ) -> Todo:
        """Update text (if given) and normalize completion unconditionally."""
        todo = await self.get_todo(todo_id)
        if text is not None:
            todo.text = clean_text(text)
        apply_completion(todo, completed)
        await self.db.commit()
        return todo

    # ─── Delete ──────────────────────────────────────────

    async def delete_todo(self, todo_id: uuid.UUID | str) -> Todo:
        """Delete one of the owner's todos and return it."""
        todo = await self.get_todo(todo_id)
        await self.db.delete(todo)
        await self.db.commit()
        return todo
