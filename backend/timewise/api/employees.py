# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Query, status

from timewise.api.deps import AuthDep
from timewise.db import SessionDep
from timewise.exceptions import raise_for_result
from timewise.schemas.employee import CreatedEmployeeResponse, EmployeePage, EmployeeResponse
from timewise.services import employee as employee_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


@employees_router.get("", response_model=list[EmployeeResponse] | EmployeePage)
async def list_employees(
    session: SessionDep,
    auth: AuthDep,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
) -> list[EmployeeResponse] | EmployeePage:
    """List employees (admin only)."""
    return raise_for_result(await employee_service.list_employees(session, auth, page, limit))


@employees_router.post("", response_model=CreatedEmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    session: SessionDep,
    auth: AuthDep,
    payload: dict[str, Any] = Body(),
) -> CreatedEmployeeResponse:
    """Create an employee and email them a temporary password (admin only)."""
    return raise_for_result(await employee_service.create_employee(session, auth, payload))


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get an employee record (admin only)."""
    return raise_for_result(await employee_service.get_employee(session, auth, employee_id))


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: dict[str, Any] = Body(),
) -> EmployeeResponse:
    """Update an employee record (admin only)."""
    return raise_for_result(await employee_service.update_employee(session, auth, employee_id, payload))
