"""Todo service tests — ownership scoping and completion normalization."""

import uuid

import pytest

from todoapp.errors import NotFound, ValidationError
from todoapp.services.credential_store import CredentialStore
from todoapp.services.todo_service import TodoService


@pytest.fixture
async def owners(db_session):
    store = CredentialStore(db_session)
    alice = await store.create("alice@x.com", "pw12345")
    bob = await store.create("bob@x.com", "pw12345")
    return alice, bob


# ═══════════════════════════════════════════════════════════
# Ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_sets_creator_to_owner(db_session, owners):
    alice, _ = owners
    todo = await TodoService(db_session, alice.id).create_todo("buy milk")
    assert todo.creator_id == alice.id
    assert todo.completed is False
    assert todo.completed_at is None


@pytest.mark.asyncio
async def test_list_only_returns_own_todos(db_session, owners):
    alice, bob = owners
    alice_svc = TodoService(db_session, alice.id)
    bob_svc = TodoService(db_session, bob.id)
    await alice_svc.create_todo("alice 1")
    await alice_svc.create_todo("alice 2")
    await bob_svc.create_todo("bob 1")

    assert [t.text for t in await alice_svc.list_todos()] == ["alice 1", "alice 2"]
    assert [t.text for t in await bob_svc.list_todos()] == ["bob 1"]


@pytest.mark.asyncio
async def test_other_owner_gets_not_found_everywhere(db_session, owners):
    alice, bob = owners
    todo = await TodoService(db_session, alice.id).create_todo("private")
    bob_svc = TodoService(db_session, bob.id)

    with pytest.raises(NotFound):
        await bob_svc.get_todo(todo.id)
    with pytest.raises(NotFound):
        await bob_svc.update_todo(todo.id, text="hijacked", completed=True)
    with pytest.raises(NotFound):
        await bob_svc.delete_todo(todo.id)

    still_there = await TodoService(db_session, alice.id).get_todo(todo.id)
    assert still_there.text == "private"
    assert still_there.completed is False


@pytest.mark.asyncio
@pytest.mark.parametrize("todo_id", ["123abc", "", str(uuid.uuid4())])
async def test_missing_or_malformed_id_is_not_found(db_session, owners, todo_id):
    alice, _ = owners
    with pytest.raises(NotFound):
        await TodoService(db_session, alice.id).get_todo(todo_id)


# ═══════════════════════════════════════════════════════════
# Completion normalization
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_completing_stamps_and_uncompleting_clears(db_session, owners):
    alice, _ = owners
    svc = TodoService(db_session, alice.id)
    todo = await svc.create_todo("laundry")

    done = await svc.update_todo(todo.id, completed=True)
    assert done.completed is True
    assert done.completed_at is not None

    undone = await svc.update_todo(todo.id, completed=False)
    assert undone.completed is False
    assert undone.completed_at is None


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [None, False, "true", 1, "yes"])
async def test_non_true_values_reset_completion(db_session, owners, value):
    alice, _ = owners
    svc = TodoService(db_session, alice.id)
    todo = await svc.create_todo("laundry", completed=True)
    assert todo.completed_at is not None

    updated = await svc.update_todo(todo.id, completed=value)
    assert updated.completed is False
    assert updated.completed_at is None


@pytest.mark.asyncio
async def test_text_only_update_keeps_text_and_resets_completion(db_session, owners):
    alice, _ = owners
    svc = TodoService(db_session, alice.id)
    todo = await svc.create_todo("draft", completed=True)

    updated = await svc.update_todo(todo.id, text="final")
    assert updated.text == "final"
    assert updated.completed is False

    unchanged_text = await svc.update_todo(todo.id, completed=True)
    assert unchanged_text.text == "final"


@pytest.mark.asyncio
async def test_delete_returns_todo_and_removes_it(db_session, owners):
    alice, _ = owners
    svc = TodoService(db_session, alice.id)
    todo = await svc.create_todo("temporary")

    deleted = await svc.delete_todo(todo.id)
    assert deleted.id == todo.id
    with pytest.raises(NotFound):
        await svc.get_todo(todo.id)


# ═══════════════════════════════════════════════════════════
# Text
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", None, 42])
async def test_blank_text_is_rejected(db_session, owners, text):
    alice, _ = owners
    svc = TodoService(db_session, alice.id)
    with pytest.raises(ValidationError):
        await svc.create_todo(text)
    assert await svc.list_todos() == []


@pytest.mark.asyncio
async def test_text_is_trimmed(db_session, owners):
    alice, _ = owners
    svc = TodoService(db_session, alice.id)
    todo = await svc.create_todo("  walk the dog  ")
    assert todo.text == "walk the dog"

    with pytest.raises(ValidationError):
        await svc.update_todo(todo.id, text="  ")
