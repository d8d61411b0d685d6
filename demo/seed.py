#!/usr/bin/env python3
"""
Demo seed script — populates a running API with sample users and carts.

!! NOT FOR PRODUCTION !!
This script creates users with known passwords. It is intended ONLY for
local demos and admin-frontend development.

What gets created:
  - Managers and users created directly and activated with their codes
  - Account requests left pending, so the approval queue is not empty
  - One approved-but-not-activated user
  - An ACTIVE cart with a few product lines for each activated user

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Reset the database and re-seed:
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000
"""

import argparse
import asyncio
import os
import random
import uuid

import httpx

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

ACTIVE_USERS = [
    {"name": "Maria Lopez", "email": "maria.lopez@example.com", "role": "MANAGER",
     "password": "MariaDemo123!"},
    {"name": "Alice Chen", "email": "alice.chen@example.com", "role": "USER",
     "password": "AliceDemo123!"},
    {"name": "Bob Martinez", "email": "bob.martinez@example.com", "role": "USER",
     "password": "BobDemo123!"},
]

PENDING_REQUESTS = [
    {"name": "Carol Nguyen", "email": "carol.nguyen@example.com"},
    {"name": "Dave Johnson", "email": "dave.johnson@example.com"},
]

APPROVED_NOT_ACTIVATED = {"name": "Erin Patel", "email": "erin.patel@example.com"}

# Stable product ids so repeated demos show the same catalogue references
PRODUCT_IDS = [uuid.uuid5(uuid.NAMESPACE_DNS, f"product-{n}.example.com") for n in range(8)]


def log(msg: str) -> None:
    print(f"  {msg}")


# ---------------------------------------------------------------------------
# API helpers
# ---------------------------------------------------------------------------

async def create_and_activate(client: httpx.AsyncClient, user: dict) -> str:
    """Create a user directly, activate it with its code, return the user id."""
    resp = await client.post("/users", json={
        "name": user["name"],
        "email": user["email"],
        "role": user["role"],
    })
    resp.raise_for_status()
    data = resp.json()

    resp = await client.post("/users/activate", json={
        "verification_code": data["verification_code"],
        "password": user["password"],
    })
    resp.raise_for_status()
    return data["id"]


async def request_account(client: httpx.AsyncClient, user: dict) -> None:
    resp = await client.post("/users/request", json=user)
    resp.raise_for_status()


async def find_user_id(client: httpx.AsyncClient, email: str) -> str:
    resp = await client.get("/users", params={"search": email, "take": 1})
    resp.raise_for_status()
    return resp.json()["data"][0]["id"]


async def fill_cart(client: httpx.AsyncClient, user_id: str) -> int:
    """Open a cart with a few random product lines; return the line count."""
    resp = await client.post("/carts", json={"user_id": user_id})
    resp.raise_for_status()
    cart_id = resp.json()["id"]

    products = random.sample(PRODUCT_IDS, k=random.randint(1, 4))
    for product_id in products:
        resp = await client.put(
            f"/carts/{cart_id}/products/{product_id}",
            json={"quantity": random.randint(1, 3)},
        )
        resp.raise_for_status()
    return len(products)


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------

async def seed(base_url: str) -> None:
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        print("\n  Seeding users")
        for user in ACTIVE_USERS:
            user_id = await create_and_activate(client, user)
            lines = await fill_cart(client, user_id)
            log(f"{user['email']:<30} {user['role']:<8} ACTIVE     cart: {lines} lines")

        for user in PENDING_REQUESTS:
            await request_account(client, user)
            log(f"{user['email']:<30} {'USER':<8} REQUEST")

        await request_account(client, APPROVED_NOT_ACTIVATED)
        user_id = await find_user_id(client, APPROVED_NOT_ACTIVATED["email"])
        resp = await client.patch(f"/users/{user_id}/approve")
        resp.raise_for_status()
        log(f"{APPROVED_NOT_ACTIVATED['email']:<30} {'USER':<8} IN_ACTIVE")

        resp = await client.get("/users", params={"take": 1})
        resp.raise_for_status()
        print(f"\n  Directory now holds {resp.json()['metadata']['total']} users\n")


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "data", "shop.db")
    db_path = os.path.normpath(db_path)

    if os.path.exists(db_path):
        os.remove(db_path)
        print(f"\n  Deleted {db_path}")
        print("  Restart the server to recreate empty tables.\n")
    else:
        print(f"\n  No database found at {db_path}\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script — NOT FOR PRODUCTION",
        epilog="Creates sample users, account requests, and carts for demos.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the database file and exit (restart server to recreate)",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
