# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from timewise.models.enums import LeaveType
from timewise.models.user import User
from timewise.schemas.balance import LeaveBalance
from timewise.schemas.result import ServiceResult
from timewise.services.guard import infrastructure_guard

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from timewise.schemas.auth import AuthContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance(user: User) -> LeaveBalance:
    return LeaveBalance(user_id=user.id, vacation_days=user.vacation_days, sick_days=user.sick_days)


async def get_user_for_update(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    """Load a user row with SELECT FOR UPDATE, refreshing any cached copy."""
    result = await session.execute(
        select(User)
        .where(col(User.id) == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def apply_deduction(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type: LeaveType,
    days: int,
) -> ServiceResult[LeaveBalance]:
    """Deduct ``days`` from the allotment matching ``leave_type``.

    Runs inside the caller's transaction and does not commit: the row lock
    taken here is held until the caller commits or rolls back, so two
    deductions for the same user cannot interleave their read and write.
    Unpaid and Other leave leave the balance untouched.
    """
    user = await get_user_for_update(session, user_id)
    if user is None:
        logger.warning("Balance deduction for unknown user %s", user_id)
        return ServiceResult.not_found("User not found")

    if leave_type == LeaveType.ANNUAL:
        if user.vacation_days < days:
            message = f"Insufficient vacation days. Available: {user.vacation_days}, Required: {days}"
            logger.info("%s (user %s)", message, user_id)
            return ServiceResult.invalid(message)
        user.vacation_days -= days
    elif leave_type == LeaveType.SICK:
        if user.sick_days < days:
            message = f"Insufficient sick days. Available: {user.sick_days}, Required: {days}"
            logger.info("%s (user %s)", message, user_id)
            return ServiceResult.invalid(message)
        user.sick_days -= days
    else:
        logger.info("No balance update needed for %s leave (user %s)", leave_type, user_id)
        return ServiceResult.ok(_build_balance(user))

    await session.flush()
    logger.info(
        "Deducted %d %s day(s) from user %s; vacation=%d sick=%d",
        days,
        leave_type,
        user_id,
        user.vacation_days,
        user.sick_days,
    )
    return ServiceResult.ok(_build_balance(user))


async def apply_credit(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type: LeaveType,
    days: int,
) -> ServiceResult[LeaveBalance]:
    """Return ``days`` to the allotment matching ``leave_type``.

    Counterpart of :func:`apply_deduction` for an approval that is taken
    back. Same locking and transaction rules; never commits.
    """
    user = await get_user_for_update(session, user_id)
    if user is None:
        logger.warning("Balance credit for unknown user %s", user_id)
        return ServiceResult.not_found("User not found")

    if leave_type == LeaveType.ANNUAL:
        user.vacation_days += days
    elif leave_type == LeaveType.SICK:
        user.sick_days += days
    else:
        return ServiceResult.ok(_build_balance(user))

    await session.flush()
    logger.info(
        "Credited %d %s day(s) back to user %s; vacation=%d sick=%d",
        days,
        leave_type,
        user_id,
        user.vacation_days,
        user.sick_days,
    )
    return ServiceResult.ok(_build_balance(user))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@infrastructure_guard("Failed to update leave balance")
async def deduct(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type: LeaveType,
    days: int,
) -> ServiceResult[LeaveBalance]:
    """Atomically deduct days from a user's balance and commit."""
    if days <= 0:
        return ServiceResult.invalid("Days to deduct must be positive")

    result = await apply_deduction(session, user_id, leave_type, days)
    if not result.success:
        return result

    await session.commit()
    return result


@infrastructure_guard("Failed to get user leave balance")
async def get_balance(
    session: AsyncSession,
    auth: AuthContext | None,
    user_id: uuid.UUID,
) -> ServiceResult[LeaveBalance]:
    """Return a user's remaining allotments. Owners and admins only."""
    if auth is None:
        return ServiceResult.unauthorized()
    if not auth.is_admin and auth.user_id != user_id:
        return ServiceResult.unauthorized()

    user = await session.get(User, user_id)
    if user is None:
        return ServiceResult.not_found("User not found")
    return ServiceResult.ok(_build_balance(user))
