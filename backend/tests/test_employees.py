"""Tests for the employee directory: admin-only CRUD, temporary credentials and welcome mail."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest

from timewise.models import User
from timewise.schemas.auth import AuthContext
from timewise.schemas.employee import EmployeePage
from timewise.schemas.result import ErrorKind
from timewise.security import verify_password
from timewise.services import employee as employee_service
from timewise.services.mailer import set_mailer

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from timewise.services.mailer import InMemoryMailer, OutgoingEmail

ADMIN = AuthContext(user_id=uuid.uuid4(), role="admin")
ADMIN_HEADERS = {"X-User-Id": str(ADMIN.user_id), "X-Role": "admin"}


def _employee_payload(email: str = "john.doe@example.com", **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "email": email,
        "firstName": "John",
        "lastName": "Doe",
        "department": "Engineering",
        "role": "user",
    }
    payload.update(overrides)
    return payload


class _FailingMailer:
    async def send(self, message: OutgoingEmail) -> None:
        msg = "SMTP server unavailable"
        raise ConnectionError(msg)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


async def test_create_employee_with_temporary_password(db_session: AsyncSession, mailer: InMemoryMailer) -> None:
    result = await employee_service.create_employee(db_session, ADMIN, _employee_payload())
    assert result.success, result.error
    created = result.data
    assert created is not None
    assert created.email == "john.doe@example.com"
    assert created.vacation_days == 20
    assert created.sick_days == 10
    assert len(created.temporary_password) == 12

    user = await db_session.get(User, created.id)
    assert user is not None
    assert user.password_reset_required is True
    assert user.password_hash is not None
    assert user.password_hash != created.temporary_password
    assert verify_password(created.temporary_password, user.password_hash)

    assert len(mailer.outbox) == 1
    assert mailer.outbox[0].to == "john.doe@example.com"
    assert created.temporary_password in mailer.outbox[0].body


async def test_create_employee_with_initial_allotments(db_session: AsyncSession) -> None:
    result = await employee_service.create_employee(
        db_session, ADMIN, _employee_payload(vacationDays=25, sickDays=15, role="admin")
    )
    assert result.data is not None
    assert (result.data.vacation_days, result.data.sick_days) == (25, 15)
    assert result.data.role == "admin"


async def test_create_employee_duplicate_email(db_session: AsyncSession) -> None:
    await employee_service.create_employee(db_session, ADMIN, _employee_payload())
    result = await employee_service.create_employee(
        db_session, ADMIN, _employee_payload(email="John.Doe@Example.com")
    )
    assert result.error == "Email already exists"
    assert result.error_kind == ErrorKind.VALIDATION


async def test_create_employee_invalid_email(db_session: AsyncSession) -> None:
    result = await employee_service.create_employee(db_session, ADMIN, _employee_payload(email="not-an-email"))
    assert result.error_kind == ErrorKind.VALIDATION
    assert result.error is not None
    assert "email" in result.error


async def test_create_employee_mail_failure_does_not_fail_creation(
    db_session: AsyncSession, caplog: pytest.LogCaptureFixture
) -> None:
    set_mailer(_FailingMailer())
    result = await employee_service.create_employee(db_session, ADMIN, _employee_payload())
    assert result.success
    assert result.data is not None
    assert await db_session.get(User, result.data.id) is not None
    assert "Failed to send welcome email" in caplog.text


async def test_create_employee_requires_admin(db_session: AsyncSession) -> None:
    for auth in (None, AuthContext(user_id=uuid.uuid4())):
        result = await employee_service.create_employee(db_session, auth, _employee_payload())
        assert result.error == "Unauthorized"


# ---------------------------------------------------------------------------
# list, get, update
# ---------------------------------------------------------------------------


async def test_list_employees_paginated(
    db_session: AsyncSession, make_user: Callable[..., Awaitable[User]]
) -> None:
    for _ in range(3):
        await make_user()

    full = await employee_service.list_employees(db_session, ADMIN)
    assert isinstance(full.data, list)
    assert len(full.data) == 3

    page = await employee_service.list_employees(db_session, ADMIN, page=2, limit=2)
    assert isinstance(page.data, EmployeePage)
    assert len(page.data.items) == 1
    assert page.data.pagination.total == 3
    assert page.data.pagination.total_pages == 2


async def test_list_employees_requires_admin(db_session: AsyncSession) -> None:
    result = await employee_service.list_employees(db_session, AuthContext(user_id=uuid.uuid4()))
    assert result.error_kind == ErrorKind.UNAUTHORIZED


async def test_get_employee(db_session: AsyncSession, make_user: Callable[..., Awaitable[User]]) -> None:
    user = await make_user(first_name="Gina")
    result = await employee_service.get_employee(db_session, ADMIN, user.id)
    assert result.data is not None
    assert result.data.first_name == "Gina"

    missing = await employee_service.get_employee(db_session, ADMIN, uuid.uuid4())
    assert missing.error == "Employee not found"
    assert missing.error_kind == ErrorKind.NOT_FOUND


async def test_update_employee(db_session: AsyncSession, make_user: Callable[..., Awaitable[User]]) -> None:
    user = await make_user(department="Sales", password_reset_required=True)
    result = await employee_service.update_employee(
        db_session,
        ADMIN,
        user.id,
        {"department": "Marketing", "vacationDays": 12, "role": "admin", "password": "s3cret-pass"},
    )
    assert result.success, result.error
    assert result.data is not None
    assert result.data.department == "Marketing"
    assert result.data.vacation_days == 12
    assert result.data.role == "admin"

    refreshed = await db_session.get(User, user.id)
    assert refreshed is not None
    assert refreshed.password_reset_required is False
    assert refreshed.password_hash is not None
    assert verify_password("s3cret-pass", refreshed.password_hash)


async def test_update_employee_rejects_negative_allotment(
    db_session: AsyncSession, make_user: Callable[..., Awaitable[User]]
) -> None:
    user = await make_user()
    result = await employee_service.update_employee(db_session, ADMIN, user.id, {"sickDays": -1})
    assert result.error_kind == ErrorKind.VALIDATION


async def test_update_missing_employee(db_session: AsyncSession) -> None:
    result = await employee_service.update_employee(db_session, ADMIN, uuid.uuid4(), {"firstName": "X"})
    assert result.error == "Employee not found"


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


async def test_create_employee_endpoint(async_client: AsyncClient) -> None:
    response = await async_client.post("/employees", json=_employee_payload(), headers=ADMIN_HEADERS)
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "john.doe@example.com"
    assert "temporary_password" in data
    assert "password_hash" not in data

    duplicate = await async_client.post("/employees", json=_employee_payload(), headers=ADMIN_HEADERS)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Email already exists"


async def test_employee_endpoints_require_admin(
    async_client: AsyncClient, make_user: Callable[..., Awaitable[User]]
) -> None:
    user = await make_user()
    headers = {"X-User-Id": str(user.id), "X-Role": "user"}
    assert (await async_client.get("/employees", headers=headers)).status_code == 403
    assert (await async_client.get(f"/employees/{user.id}", headers=headers)).status_code == 403
    assert (await async_client.post("/employees", json=_employee_payload(), headers=headers)).status_code == 403


async def test_get_and_update_employee_endpoints(
    async_client: AsyncClient, make_user: Callable[..., Awaitable[User]]
) -> None:
    user = await make_user(first_name="Paula")
    response = await async_client.get(f"/employees/{user.id}", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["first_name"] == "Paula"

    updated = await async_client.put(f"/employees/{user.id}", json={"lastName": "Perez"}, headers=ADMIN_HEADERS)
    assert updated.status_code == 200
    assert updated.json()["last_name"] == "Perez"

    missing = await async_client.get(f"/employees/{uuid.uuid4()}", headers=ADMIN_HEADERS)
    assert missing.status_code == 404


async def test_list_employees_endpoint_paginated(
    async_client: AsyncClient, make_user: Callable[..., Awaitable[User]]
) -> None:
    for _ in range(3):
        await make_user()
    response = await async_client.get("/employees", params={"page": 1, "limit": 2}, headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["pagination"]["total"] == 3
