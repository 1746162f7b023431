"""
Shared helpers for todoapp examples.

Handles the health check and account setup so each example can focus
on its specific workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000"


def check_backend() -> None:
    """Verify the backend is reachable and its database is up."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  todoapp init-db && todoapp serve")
        sys.exit(1)

    health = resp.json()
    print(f"Backend {health['status']} (v{health['version']})")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    if health["database"] != "ok":
        print("\nERROR: Database is not reachable. Check TODOAPP_DATABASE_URL.")
        sys.exit(1)


def signup(label: str) -> tuple[dict, str]:
    """Create a throwaway account, returning (user, token).

    Uses a unique email per run so examples are idempotent.
    """
    run_id = uuid.uuid4().hex[:8]
    resp = httpx.post(
        f"{BASE}/users",
        json={"email": f"{label}-{run_id}@example.com", "password": "demo-password-123"},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Signup failed: {resp.status_code} {resp.text}")
        sys.exit(1)
    return resp.json(), resp.headers["x-auth"]
