"""Seed script for development data.

Run with:  python -m timewise.seed
Inside Docker:  docker compose exec api python -m timewise.seed

Talks to a running API. Accounts that already exist are skipped, and leave
requests that would overlap an existing one are rejected by the API and
reported as skipped, so the script can be re-run safely.
"""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import date, timedelta

import httpx

BASE_URL = os.environ.get("TIMEWISE_API_URL", "http://localhost:8000")

# Identity used to create the first accounts; the API trusts the role header.
BOOTSTRAP_ADMIN_ID = "00000000-0000-0000-0000-000000000001"

ADMIN_HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": BOOTSTRAP_ADMIN_ID,
    "X-Role": "admin",
}

ADMINS = [
    {
        "email": "admin@timewise.com",
        "first_name": "System",
        "last_name": "Administrator",
        "department": "IT",
        "role": "admin",
        "vacation_days": 25,
        "sick_days": 15,
    },
    {
        "email": "hr.manager@timewise.com",
        "first_name": "Sarah",
        "last_name": "Johnson",
        "department": "Human Resources",
        "role": "admin",
        "vacation_days": 25,
        "sick_days": 15,
    },
]

EMPLOYEES = [
    {"email": "john.doe@timewise.com", "first_name": "John", "last_name": "Doe", "department": "Engineering"},
    {"email": "jane.smith@timewise.com", "first_name": "Jane", "last_name": "Smith", "department": "Marketing"},
    {"email": "mike.wilson@timewise.com", "first_name": "Mike", "last_name": "Wilson", "department": "Sales"},
]


def _user_headers(user_id: str) -> dict[str, str]:
    return {"Content-Type": "application/json", "X-User-Id": user_id, "X-Role": "user"}


def _next_monday(today: date, weeks_ahead: int = 1) -> date:
    return today + timedelta(days=7 - today.weekday() + 7 * (weeks_ahead - 1))


async def _create_account(client: httpx.AsyncClient, body: dict) -> None:
    label = f"{body['first_name']} {body['last_name']} <{body['email']}>"
    resp = await client.post(f"{BASE_URL}/employees", json=body, headers=ADMIN_HEADERS)
    if resp.status_code == 201:
        print(f"  [OK] {label} (temporary password: {resp.json()['temporary_password']})")
        return
    if resp.status_code == 400 and resp.json().get("detail") == "Email already exists":
        print(f"  [SKIP] {label} (already exists)")
        return
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")


async def seed_accounts(client: httpx.AsyncClient) -> None:
    """Create the admin accounts and sample employees."""
    print("\n--- Seeding accounts ---")
    for admin in ADMINS:
        await _create_account(client, admin)
    for employee in EMPLOYEES:
        await _create_account(client, {**employee, "role": "user", "vacation_days": 20, "sick_days": 10})


async def _employee_ids(client: httpx.AsyncClient) -> dict[str, str]:
    resp = await client.get(f"{BASE_URL}/employees", headers=ADMIN_HEADERS)
    resp.raise_for_status()
    return {item["email"]: item["id"] for item in resp.json()}


async def seed_requests(client: httpx.AsyncClient) -> None:
    """Submit sample leave requests and approve one of them."""
    print("\n--- Seeding leave requests ---")
    ids = await _employee_ids(client)
    reviewer_headers = {**ADMIN_HEADERS, "X-User-Id": ids.get("admin@timewise.com", BOOTSTRAP_ADMIN_ID)}
    today = date.today()

    first_week = _next_monday(today, weeks_ahead=2)
    samples = [
        (
            "john.doe@timewise.com",
            {
                "type": "Annual",
                "startDate": first_week.isoformat(),
                "endDate": (first_week + timedelta(days=4)).isoformat(),
                "reason": "Family holiday",
            },
            True,
        ),
        (
            "john.doe@timewise.com",
            {
                "type": "Sick",
                "startDate": (today - timedelta(days=2)).isoformat(),
                "endDate": (today - timedelta(days=1)).isoformat(),
                "reason": "Flu",
            },
            False,
        ),
        (
            "jane.smith@timewise.com",
            {
                "type": "Annual",
                "startDate": _next_monday(today, weeks_ahead=4).isoformat(),
                "endDate": (_next_monday(today, weeks_ahead=4) + timedelta(days=2)).isoformat(),
                "reason": "Conference",
            },
            False,
        ),
    ]

    for email, body, approve in samples:
        user_id = ids.get(email)
        label = f"{body['type']} {body['startDate']}..{body['endDate']} for {email}"
        if user_id is None:
            print(f"  [SKIP] {label} (no such employee)")
            continue

        resp = await client.post(f"{BASE_URL}/requests", json=body, headers=_user_headers(user_id))
        if resp.status_code == 400 and "overlapping" in resp.json().get("detail", ""):
            print(f"  [SKIP] {label} (already requested)")
            continue
        if resp.status_code != 201:
            print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
            continue
        print(f"  [OK] {label}")

        if approve:
            request_id = resp.json()["id"]
            review = await client.patch(
                f"{BASE_URL}/requests/{request_id}",
                json={"status": "Approved", "reviewNote": "Enjoy!"},
                headers=reviewer_headers,
            )
            if review.status_code == 200:
                print(f"  [OK] approved {label}")
            else:
                print(f"  [ERROR] approving {label}: {review.status_code} {review.text[:200]}")


async def main() -> None:
    print("=" * 60)
    print("  Timewise HRMS: Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            print("Make sure the API is running (uvicorn timewise.main:app)")
            sys.exit(1)

        await seed_accounts(client)
        await seed_requests(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
