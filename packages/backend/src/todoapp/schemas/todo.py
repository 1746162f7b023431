"""Pydantic schemas for todos.

Learn: There is no creator_id on the write schemas. Unknown fields are
ignored, so a client that sends one simply has it dropped; the owner is
always the authenticated user.

``completed`` is accepted as any JSON value on purpose: only a literal
``true`` marks a todo complete, everything else resets it.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class TodoCreate(BaseModel):
    text: str = Field(..., min_length=1)
    completed: Any = False

    model_config = {"str_strip_whitespace": True}


class TodoUpdate(BaseModel):
    """Partial update. text is applied only when present."""
    text: Optional[str] = Field(None, min_length=1)
    completed: Any = None

    model_config = {"str_strip_whitespace": True}


class TodoRead(BaseModel):
    id: uuid.UUID
    text: str
    completed: bool
    completed_at: Optional[datetime]
    creator_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class TodoEnvelope(BaseModel):
    todo: TodoRead


class TodoList(BaseModel):
    todos: list[TodoRead]
