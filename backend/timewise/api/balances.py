# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from timewise.api.deps import AdminDep, AuthDep
from timewise.db import SessionDep
from timewise.exceptions import raise_for_result
from timewise.schemas.balance import DeductionInput, LeaveBalance
from timewise.services import balance as balance_service

balance_router = APIRouter(prefix="/employees/{employee_id}/balance", tags=["balances"])


@balance_router.get("", response_model=LeaveBalance)
async def get_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveBalance:
    """Get an employee's remaining vacation and sick days (owner or admin)."""
    return raise_for_result(await balance_service.get_balance(session, auth, employee_id))


@balance_router.post("/deductions", response_model=LeaveBalance)
async def deduct_balance(
    employee_id: uuid.UUID,
    payload: DeductionInput,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveBalance:
    """Deduct days from an employee's balance (admin only)."""
    return raise_for_result(
        await balance_service.deduct(session, employee_id, payload.leave_type, payload.days)
    )
