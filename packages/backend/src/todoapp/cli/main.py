"""todoapp CLI — run the server and talk to it.

Usage:
    todoapp init-db                              # Create database tables
    todoapp serve                                # Run the API with uvicorn
    todoapp signup me@example.com                # Create account, print token
    todoapp login me@example.com                 # New session, print token
    todoapp logout                               # Revoke $TODOAPP_TOKEN
    todoapp todos                                # List your todos
    todoapp add "buy milk"                       # Create a todo
    todoapp done <id>                            # Mark a todo completed
    todoapp rm <id>                              # Delete a todo

Client commands read the session token from --token or TODOAPP_TOKEN.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from typing import Optional

import click
import httpx

from todoapp import __version__
from todoapp.config import settings

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TODOAPP_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the todoapp backend."""
    headers = {settings.auth_header: token} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No running loop — normal CLI invocation
        return asyncio.run(coro)
    else:
        # Already inside an event loop (e.g. test runner) — run in a thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _require_token(token: Optional[str]) -> str:
    """Resolve the session token from flag or TODOAPP_TOKEN env var."""
    tok = token or os.environ.get("TODOAPP_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set TODOAPP_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> None:
    """Exit with the server's message on any non-2xx response."""
    if r.is_success:
        return
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    click.secho(f"Error {r.status_code}: {detail}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


token_option = click.option(
    "--token", "-k", help="Session token (or set TODOAPP_TOKEN)"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="todoapp")
def main():
    """todoapp — multi-user todo backend."""


# ---------------------------------------------------------------------------
# Server commands
# ---------------------------------------------------------------------------


@main.command("init-db")
def init_db():
    """Create all database tables (idempotent)."""
    from todoapp.db.engine import engine, init_models

    async def _init():
        try:
            await init_models()
        finally:
            await engine.dispose()

    _run(_init())
    click.secho("Database tables created.", fg="green")


@main.command()
@click.option("--host", default=None, help="Bind address (default: TODOAPP_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: TODOAPP_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "todoapp.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Account commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option()
def signup(email: str, password: str):
    """Create an account and print its session token."""
    _run(_session_impl("/users", email, password))


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Start a new session and print its token."""
    _run(_session_impl("/users/login", email, password))


async def _session_impl(path: str, email: str, password: str):
    async with _client() as c:
        r = await c.post(path, json={"email": email, "password": password})
        _check(r)
        click.secho(f"Signed in as {r.json()['email']}", fg="green", err=True)
        # Token alone on stdout so it can be captured: export TODOAPP_TOKEN=$(...)
        click.echo(r.headers[settings.auth_header])


@main.command()
@token_option
def logout(token: Optional[str]):
    """Revoke the session token."""
    tok = _require_token(token)

    async def _logout():
        async with _client(tok) as c:
            _check(await c.delete("/users/me/token"))

    _run(_logout())
    click.secho("Logged out.", fg="green")


# ---------------------------------------------------------------------------
# Todo commands
# ---------------------------------------------------------------------------


@main.command()
@token_option
def todos(token: Optional[str]):
    """List your todos."""
    tok = _require_token(token)

    async def _list():
        async with _client(tok) as c:
            r = await c.get("/todos")
            _check(r)
            return r.json()["todos"]

    rows = _run(_list())
    if not rows:
        click.echo("No todos.")
        return
    for row in rows:
        row["done"] = "x" if row["completed"] else ""
    _print_table(rows, [("ID", "id", 36), ("DONE", "done", 4), ("TEXT", "text", 50)])


@main.command()
@click.argument("text")
@token_option
def add(text: str, token: Optional[str]):
    """Create a todo."""
    tok = _require_token(token)

    async def _add():
        async with _client(tok) as c:
            r = await c.post("/todos", json={"text": text})
            _check(r)
            return r.json()

    todo = _run(_add())
    click.secho(f"Created {todo['id']}", fg="green")


@main.command()
@click.argument("todo_id")
@click.option("--undo", is_flag=True, help="Mark as not completed instead")
@token_option
def done(todo_id: str, undo: bool, token: Optional[str]):
    """Mark a todo completed (or not, with --undo)."""
    tok = _require_token(token)

    async def _done():
        async with _client(tok) as c:
            _check(await c.patch(f"/todos/{todo_id}", json={"completed": not undo}))

    _run(_done())
    click.secho("Updated.", fg="green")


@main.command()
@click.argument("todo_id")
@token_option
def rm(todo_id: str, token: Optional[str]):
    """Delete a todo."""
    tok = _require_token(token)

    async def _rm():
        async with _client(tok) as c:
            _check(await c.delete(f"/todos/{todo_id}"))

    _run(_rm())
    click.secho("Deleted.", fg="green")


if __name__ == "__main__":
    main()
