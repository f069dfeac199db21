# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlmodel import col

from timewise.config import get_settings
from timewise.models.user import User
from timewise.schemas.employee import (
    CreatedEmployeeResponse,
    CreateEmployeeRequest,
    EmployeePage,
    EmployeeResponse,
    UpdateEmployeeRequest,
)
from timewise.schemas.pagination import PaginationMeta, page_params
from timewise.schemas.result import ServiceResult, describe_validation_error
from timewise.security import generate_temporary_password, hash_password
from timewise.services.guard import infrastructure_guard
from timewise.services.mailer import get_mailer, welcome_email

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from timewise.schemas.auth import AuthContext

logger = logging.getLogger(__name__)


def _build_employee_response(user: User) -> EmployeeResponse:
    return EmployeeResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        department=user.department,
        role=user.role,
        vacation_days=user.vacation_days,
        sick_days=user.sick_days,
        created_at=user.created_at,
    )


@infrastructure_guard("Failed to fetch employees")
async def list_employees(
    session: AsyncSession,
    auth: AuthContext | None,
    page: int | None = None,
    limit: int | None = None,
) -> ServiceResult[list[EmployeeResponse] | EmployeePage]:
    """List employees, newest first (admin only)."""
    if auth is None or not auth.is_admin:
        return ServiceResult.unauthorized()

    query = select(User).order_by(col(User.created_at).desc())

    paging = page_params(page, limit)
    if paging is not None:
        page_no, size = paging
        total = (await session.execute(select(func.count()).select_from(User))).scalar_one()
        result = await session.execute(query.offset((page_no - 1) * size).limit(size))
        items = [_build_employee_response(u) for u in result.scalars().all()]
        return ServiceResult.ok(
            EmployeePage(items=items, pagination=PaginationMeta.build(total=total, page=page_no, limit=size))
        )

    result = await session.execute(query)
    return ServiceResult.ok([_build_employee_response(u) for u in result.scalars().all()])


@infrastructure_guard("Failed to fetch employee")
async def get_employee(
    session: AsyncSession,
    auth: AuthContext | None,
    employee_id: uuid.UUID,
) -> ServiceResult[EmployeeResponse]:
    """Fetch one employee record (admin only)."""
    if auth is None or not auth.is_admin:
        return ServiceResult.unauthorized()

    user = await session.get(User, employee_id)
    if user is None:
        return ServiceResult.not_found("Employee not found")
    return ServiceResult.ok(_build_employee_response(user))


@infrastructure_guard("Failed to create employee")
async def create_employee(
    session: AsyncSession,
    auth: AuthContext | None,
    data: Mapping[str, Any] | CreateEmployeeRequest,
) -> ServiceResult[CreatedEmployeeResponse]:
    """Create an employee with a temporary password and send a welcome email.

    The temporary password is returned once in the response. A failed
    welcome email is logged and does not undo the creation.
    """
    if auth is None or not auth.is_admin:
        return ServiceResult.unauthorized()

    if isinstance(data, CreateEmployeeRequest):
        payload = data
    else:
        try:
            payload = CreateEmployeeRequest.model_validate(data)
        except PydanticValidationError as exc:
            return ServiceResult.invalid(describe_validation_error(exc))

    email = str(payload.email).lower()
    existing = await session.execute(select(col(User.id)).where(func.lower(col(User.email)) == email))
    if existing.first() is not None:
        return ServiceResult.invalid("Email already exists")

    settings = get_settings()
    temporary_password = generate_temporary_password()
    user = User(
        email=email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        department=payload.department,
        role=payload.role.value,
        password_hash=hash_password(temporary_password),
        password_reset_required=True,
        vacation_days=(
            payload.vacation_days if payload.vacation_days is not None else settings.default_vacation_days
        ),
        sick_days=payload.sick_days if payload.sick_days is not None else settings.default_sick_days,
    )
    session.add(user)
    await session.commit()
    logger.info("Employee %s created by %s (%s, role=%s)", user.id, auth.user_id, user.email, user.role)

    try:
        await get_mailer().send(welcome_email(user.email, user.first_name, temporary_password))
    except Exception:
        logger.exception("Failed to send welcome email to %s", user.email)

    employee = _build_employee_response(user)
    return ServiceResult.ok(
        CreatedEmployeeResponse(**employee.model_dump(), temporary_password=temporary_password)
    )


@infrastructure_guard("Failed to update employee")
async def update_employee(
    session: AsyncSession,
    auth: AuthContext | None,
    employee_id: uuid.UUID,
    data: Mapping[str, Any] | UpdateEmployeeRequest,
) -> ServiceResult[EmployeeResponse]:
    """Apply a partial update to an employee (admin only)."""
    if auth is None or not auth.is_admin:
        return ServiceResult.unauthorized()

    if isinstance(data, UpdateEmployeeRequest):
        payload = data
    else:
        try:
            payload = UpdateEmployeeRequest.model_validate(data)
        except PydanticValidationError as exc:
            return ServiceResult.invalid(describe_validation_error(exc))

    user = await session.get(User, employee_id)
    if user is None:
        return ServiceResult.not_found("Employee not found")

    changes = payload.model_dump(exclude_unset=True)
    password = changes.pop("password", None)
    for field, value in changes.items():
        if value is None and field != "department":
            continue
        setattr(user, field, value.value if field == "role" else value)
    if password is not None:
        user.password_hash = hash_password(password)
        user.password_reset_required = False

    await session.commit()
    logger.info("Employee %s updated by %s: %s", employee_id, auth.user_id, sorted(changes))
    return ServiceResult.ok(_build_employee_response(user))
