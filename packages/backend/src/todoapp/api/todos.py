"""Todo API routes.

Learn: Every route gets its TodoService through _todo_svc, which first
resolves the AuthContext. So the auth check always runs before the
handler, and the service it hands over can only see the caller's own
todos.

Key patterns:
- Path ids are taken as plain strings; a malformed id is a 404 like
  any other missing todo, not a 422
- PATCH always normalizes completion (see TodoService)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from todoapp.auth.dependencies import AuthContext, get_auth_context
from todoapp.db.engine import get_db
from todoapp.schemas.todo import (
    TodoCreate,
    TodoEnvelope,
    TodoList,
    TodoRead,
    TodoUpdate,
)
from todoapp.services.todo_service import TodoService

router = APIRouter(prefix="/todos")


def _todo_svc(
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
) -> TodoService:
    return TodoService(db, owner_id=ctx.user.id)


@router.post("", response_model=TodoRead)
async def create_todo(
    body: TodoCreate,
    svc: TodoService = Depends(_todo_svc),
):
    """Create a todo owned by the caller."""
    return await svc.create_todo(text=body.text, completed=body.completed)


@router.get("", response_model=TodoList)
async def list_todos(svc: TodoService = Depends(_todo_svc)):
    """List the caller's todos."""
    return {"todos": await svc.list_todos()}


@router.get("/{todo_id}", response_model=TodoEnvelope)
async def get_todo(
    todo_id: str,
    svc: TodoService = Depends(_todo_svc),
):
    """Get a single todo by ID."""
    return {"todo": await svc.get_todo(todo_id)}


@router.patch("/{todo_id}", response_model=TodoEnvelope)
async def update_todo(
    todo_id: str,
    body: TodoUpdate,
    svc: TodoService = Depends(_todo_svc),
):
    """Update text and/or completion of a todo."""
    todo = await svc.update_todo(todo_id, text=body.text, completed=body.completed)
    return {"todo": todo}


@router.delete("/{todo_id}", response_model=TodoEnvelope)
async def delete_todo(
    todo_id: str,
    svc: TodoService = Depends(_todo_svc),
):
    """Delete a todo and return what was removed."""
    return {"todo": await svc.delete_todo(todo_id)}
