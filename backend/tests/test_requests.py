"""Integration tests for the leave-request HTTP endpoints: status codes,
error bodies and caller identity headers.
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient

    from timewise.models import User

REQUESTS_URL = "/requests"


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def _headers(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id), "X-Role": user.role}


def _next_monday() -> date:
    today = date.today()
    return today + timedelta(days=7 - today.weekday())


def _body(start: date, end: date, leave_type: str = "Annual", reason: str = "trip") -> dict[str, Any]:
    return {"type": leave_type, "startDate": start.isoformat(), "endDate": end.isoformat(), "reason": reason}


async def _create(client: AsyncClient, user: User, start: date, end: date) -> dict[str, Any]:
    response = await client.post(REQUESTS_URL, json=_body(start, end), headers=_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def employee(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user(first_name="Uma", email="u1@example.com")


@pytest.fixture
async def colleague(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user(first_name="Ugo", email="u2@example.com")


@pytest.fixture
async def admin(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user(first_name="Ada", email="admin@example.com", role="admin")


# ---------------------------------------------------------------------------
# POST /requests
# ---------------------------------------------------------------------------


async def test_create_returns_201_with_owner_fields(async_client: AsyncClient, employee: User) -> None:
    monday = _next_monday()
    response = await async_client.post(
        REQUESTS_URL, json=_body(monday, monday + timedelta(days=2)), headers=_headers(employee)
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Pending"
    assert data["days_requested"] == 3
    assert data["start_date"] == monday.isoformat()
    assert data["user"] == {"first_name": "Uma", "last_name": employee.last_name, "email": "u1@example.com"}


async def test_create_without_identity_is_403(async_client: AsyncClient) -> None:
    monday = _next_monday()
    response = await async_client.post(REQUESTS_URL, json=_body(monday, monday))
    assert response.status_code == 403
    assert response.json() == {"error": "UnauthorizedError", "detail": "Unauthorized", "status_code": 403}


async def test_create_with_malformed_user_header_is_403(async_client: AsyncClient) -> None:
    monday = _next_monday()
    response = await async_client.post(
        REQUESTS_URL, json=_body(monday, monday), headers={"X-User-Id": "not-a-uuid"}
    )
    assert response.status_code == 403


async def test_create_validation_errors_are_400(async_client: AsyncClient, employee: User) -> None:
    monday = _next_monday()
    response = await async_client.post(
        REQUESTS_URL, json=_body(monday + timedelta(days=1), monday), headers=_headers(employee)
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "InvalidInputError"
    assert body["detail"] == "Start date must be before end date"


async def test_create_non_object_body_is_400(async_client: AsyncClient, employee: User) -> None:
    response = await async_client.post(REQUESTS_URL, json=["not", "an", "object"], headers=_headers(employee))
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid input")


async def test_create_overlap_is_400(async_client: AsyncClient, employee: User) -> None:
    monday = _next_monday()
    await _create(async_client, employee, monday, monday + timedelta(days=2))

    response = await async_client.post(
        REQUESTS_URL,
        json=_body(monday + timedelta(days=1), monday + timedelta(days=3)),
        headers=_headers(employee),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "You have overlapping leave requests for these dates"


# ---------------------------------------------------------------------------
# GET /requests, GET /requests/{id}
# ---------------------------------------------------------------------------


async def test_list_for_non_admin_ignores_user_id_param(
    async_client: AsyncClient, employee: User, colleague: User
) -> None:
    monday = _next_monday()
    await _create(async_client, employee, monday, monday)
    own = await _create(async_client, colleague, monday, monday)

    response = await async_client.get(
        REQUESTS_URL, params={"userId": str(employee.id)}, headers=_headers(colleague)
    )
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [own["id"]]


async def test_list_paginated_shape(async_client: AsyncClient, employee: User, admin: User) -> None:
    monday = _next_monday()
    for week in range(3):
        start = monday + timedelta(days=7 * week)
        await _create(async_client, employee, start, start)

    response = await async_client.get(
        REQUESTS_URL, params={"page": 1, "limit": 2, "status": "all"}, headers=_headers(admin)
    )
    assert response.status_code == 200
    data = response.json()
    assert len(data["items"]) == 2
    assert data["pagination"] == {"total": 3, "page": 1, "limit": 2, "total_pages": 2}


async def test_list_invalid_status_is_400(async_client: AsyncClient, admin: User) -> None:
    response = await async_client.get(REQUESTS_URL, params={"status": "Archived"}, headers=_headers(admin))
    assert response.status_code == 400


async def test_get_request_status_codes(async_client: AsyncClient, employee: User, colleague: User) -> None:
    monday = _next_monday()
    created = await _create(async_client, employee, monday, monday)

    ok = await async_client.get(f"{REQUESTS_URL}/{created['id']}", headers=_headers(employee))
    assert ok.status_code == 200
    assert ok.json()["id"] == created["id"]

    forbidden = await async_client.get(f"{REQUESTS_URL}/{created['id']}", headers=_headers(colleague))
    assert forbidden.status_code == 403

    missing = await async_client.get(f"{REQUESTS_URL}/{uuid.uuid4()}", headers=_headers(employee))
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Leave request not found"


# ---------------------------------------------------------------------------
# PATCH /requests/{id}
# ---------------------------------------------------------------------------


async def test_review_then_second_review_is_409(async_client: AsyncClient, employee: User, admin: User) -> None:
    monday = _next_monday()
    created = await _create(async_client, employee, monday, monday + timedelta(days=2))
    url = f"{REQUESTS_URL}/{created['id']}"

    first = await async_client.patch(url, json={"status": "Approved", "reviewNote": "ok"}, headers=_headers(admin))
    assert first.status_code == 200
    data = first.json()
    assert data["status"] == "Approved"
    assert data["reviewed_by"] == str(admin.id)
    assert data["reviewed_at"] is not None
    assert data["review_note"] == "ok"

    second = await async_client.patch(url, json={"status": "Rejected"}, headers=_headers(admin))
    assert second.status_code == 409
    assert second.json()["detail"] == "Can only review pending requests"


async def test_review_by_employee_is_403(async_client: AsyncClient, employee: User) -> None:
    monday = _next_monday()
    created = await _create(async_client, employee, monday, monday)
    response = await async_client.patch(
        f"{REQUESTS_URL}/{created['id']}", json={"status": "Approved"}, headers=_headers(employee)
    )
    assert response.status_code == 403


async def test_review_spoofed_role_header_is_not_admin(async_client: AsyncClient, employee: User) -> None:
    monday = _next_monday()
    created = await _create(async_client, employee, monday, monday)
    response = await async_client.patch(
        f"{REQUESTS_URL}/{created['id']}",
        json={"status": "Approved"},
        headers={"X-User-Id": str(employee.id), "X-Role": "superuser"},
    )
    assert response.status_code == 403


async def test_review_missing_request_is_404(async_client: AsyncClient, admin: User) -> None:
    response = await async_client.patch(
        f"{REQUESTS_URL}/{uuid.uuid4()}", json={"status": "Approved"}, headers=_headers(admin)
    )
    assert response.status_code == 404


async def test_review_insufficient_balance_is_400(
    async_client: AsyncClient, make_user: Callable[..., Awaitable[User]], admin: User
) -> None:
    broke = await make_user(vacation_days=0)
    monday = _next_monday()
    created = await _create(async_client, broke, monday, monday)
    response = await async_client.patch(
        f"{REQUESTS_URL}/{created['id']}", json={"status": "Approved"}, headers=_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Insufficient vacation days. Available: 0, Required: 1"


# ---------------------------------------------------------------------------
# PUT /requests/{id}/update, PUT /requests/{id}/admin-update
# ---------------------------------------------------------------------------


async def test_owner_update_and_conflict_after_review(
    async_client: AsyncClient, employee: User, colleague: User, admin: User
) -> None:
    monday = _next_monday()
    created = await _create(async_client, employee, monday, monday)
    url = f"{REQUESTS_URL}/{created['id']}/update"

    updated = await async_client.put(
        url, json=_body(monday, monday + timedelta(days=1), reason="longer"), headers=_headers(employee)
    )
    assert updated.status_code == 200
    assert updated.json()["days_requested"] == 2

    not_owner = await async_client.put(url, json=_body(monday, monday), headers=_headers(colleague))
    assert not_owner.status_code == 403
    assert not_owner.json()["detail"] == "Unauthorized to edit this request"

    await async_client.patch(f"{REQUESTS_URL}/{created['id']}", json={"status": "Rejected"}, headers=_headers(admin))
    after_review = await async_client.put(url, json=_body(monday, monday), headers=_headers(employee))
    assert after_review.status_code == 409
    assert after_review.json()["detail"] == "Only pending requests can be edited"


async def test_admin_update_flips_status(async_client: AsyncClient, employee: User, admin: User) -> None:
    monday = _next_monday()
    created = await _create(async_client, employee, monday, monday)
    await async_client.patch(f"{REQUESTS_URL}/{created['id']}", json={"status": "Approved"}, headers=_headers(admin))

    response = await async_client.put(
        f"{REQUESTS_URL}/{created['id']}/admin-update",
        json={**_body(monday, monday), "status": "Rejected"},
        headers=_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Rejected"
    assert response.json()["reviewed_by"] == str(admin.id)


async def test_admin_update_by_employee_is_403(async_client: AsyncClient, employee: User) -> None:
    monday = _next_monday()
    created = await _create(async_client, employee, monday, monday)
    response = await async_client.put(
        f"{REQUESTS_URL}/{created['id']}/admin-update",
        json={**_body(monday, monday), "status": "Approved"},
        headers=_headers(employee),
    )
    assert response.status_code == 403
