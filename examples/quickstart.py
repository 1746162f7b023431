#!/usr/bin/env python3
"""
todoapp Quickstart — two users, one private todo, one logout.

Signs up Alice and Bob, has Alice create a todo, shows that Bob can't
see it, completes it, then logs Alice out and shows her token stops
working.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

import sys

import httpx

from _common import BASE, check_backend, signup


def main():
    check_backend()

    # ── Accounts ──────────────────────────────────────────────────
    print("\n1. Signing up two users...")
    alice, alice_token = signup("alice")
    bob, bob_token = signup("bob")
    print(f"   Alice: {alice['email']}")
    print(f"   Bob:   {bob['email']}")

    as_alice = httpx.Client(base_url=BASE, headers={"x-auth": alice_token}, timeout=10)
    as_bob = httpx.Client(base_url=BASE, headers={"x-auth": bob_token}, timeout=10)

    # ── Alice creates a todo ──────────────────────────────────────
    print("\n2. Alice creates a todo...")
    resp = as_alice.post("/todos", json={"text": "buy milk"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    todo = resp.json()
    print(f"   Todo: {todo['text']} ({todo['id'][:8]}...)")

    # ── Bob can't see it ──────────────────────────────────────────
    print("\n3. Bob tries to read Alice's todo...")
    resp = as_bob.get(f"/todos/{todo['id']}")
    print(f"   → {resp.status_code} (expected 404)")
    resp = as_bob.get("/todos")
    print(f"   Bob's list has {len(resp.json()['todos'])} todos")

    # ── Alice completes it ────────────────────────────────────────
    print("\n4. Alice completes her todo...")
    resp = as_alice.patch(f"/todos/{todo['id']}", json={"completed": True})
    done = resp.json()["todo"]
    print(f"   completed={done['completed']} at {done['completed_at']}")

    # ── Logout ────────────────────────────────────────────────────
    print("\n5. Alice logs out...")
    resp = as_alice.delete("/users/me/token")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    resp = as_alice.get("/todos")
    print(f"   Old token now gets {resp.status_code} (expected 401)")
    if resp.status_code != 401:
        sys.exit(1)

    print("\nDone.")


if __name__ == "__main__":
    main()
