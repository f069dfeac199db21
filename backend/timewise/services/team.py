"""Department team view: colleagues with their used allotments and current leave."""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from timewise.models.enums import LeaveStatus, LeaveType
from timewise.models.leave_request import LeaveRequest
from timewise.models.user import User
from timewise.schemas.result import ServiceResult
from timewise.schemas.team import TeamMember, TeamResponse
from timewise.services.guard import infrastructure_guard

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from timewise.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

DEPARTMENT_REQUIRED = "Department parameter is required"
OTHER_DEPARTMENT = "Access denied: Can only view your own department"


async def _used_days(session: AsyncSession, member_ids: list[uuid.UUID]) -> dict[tuple[uuid.UUID, str], int]:
    """Approved working days per (user, leave type)."""
    rows = (
        await session.execute(
            select(
                col(LeaveRequest.user_id),
                col(LeaveRequest.type),
                func.coalesce(func.sum(col(LeaveRequest.days_requested)), 0),
            )
            .where(
                col(LeaveRequest.user_id).in_(member_ids),
                col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
            )
            .group_by(col(LeaveRequest.user_id), col(LeaveRequest.type))
        )
    ).all()
    return {(user_id, leave_type): int(days) for user_id, leave_type, days in rows}


async def _current_leave_ends(
    session: AsyncSession, member_ids: list[uuid.UUID], today: date
) -> dict[uuid.UUID, date]:
    """Last day of the approved leave each member is on today, if any."""
    rows = (
        await session.execute(
            select(col(LeaveRequest.user_id), func.max(col(LeaveRequest.end_date)))
            .where(
                col(LeaveRequest.user_id).in_(member_ids),
                col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
                col(LeaveRequest.start_date) <= today,
                col(LeaveRequest.end_date) >= today,
            )
            .group_by(col(LeaveRequest.user_id))
        )
    ).all()
    return {user_id: end_date for user_id, end_date in rows}


@infrastructure_guard("Failed to fetch team members")
async def team_members(
    session: AsyncSession,
    auth: AuthContext | None,
    department: str | None,
) -> ServiceResult[TeamResponse]:
    """Members of ``department`` other than the caller.

    Non-admins may only look at their own department. Used days count
    approved Annual and Sick requests; a member is on leave when an approved
    request covers today.
    """
    if auth is None:
        return ServiceResult.unauthorized()
    if not department:
        return ServiceResult.invalid(DEPARTMENT_REQUIRED)

    caller = await session.get(User, auth.user_id)
    if caller is None:
        return ServiceResult.not_found("User not found")
    if not auth.is_admin and caller.department != department:
        logger.warning("User %s (%s) asked for the %s team", auth.user_id, caller.department, department)
        return ServiceResult.unauthorized(OTHER_DEPARTMENT)

    result = await session.execute(
        select(User)
        .where(col(User.department) == department, col(User.id) != auth.user_id)
        .order_by(col(User.last_name), col(User.first_name))
    )
    users = list(result.scalars().all())
    member_ids = [user.id for user in users]

    used: dict[tuple[uuid.UUID, str], int] = defaultdict(int)
    leave_ends: dict[uuid.UUID, date] = {}
    if member_ids:
        used.update(await _used_days(session, member_ids))
        leave_ends = await _current_leave_ends(session, member_ids, date.today())

    members = [
        TeamMember(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            department=user.department,
            role=user.role,
            vacation_days=user.vacation_days,
            sick_days=user.sick_days,
            used_vacation=used[(user.id, LeaveType.ANNUAL.value)],
            used_sick=used[(user.id, LeaveType.SICK.value)],
            is_on_leave=user.id in leave_ends,
            leave_end_date=leave_ends.get(user.id),
        )
        for user in users
    ]
    return ServiceResult.ok(TeamResponse(department=department, members=members))
