"""Analytics: company-wide statistics, the personal dashboard and the leave calendar."""

# ruff: noqa: TC003
from __future__ import annotations

import calendar
import logging
import uuid
from collections import Counter
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import and_, func, or_, select
from sqlmodel import col

from timewise.models.enums import LeaveStatus, UserRole
from timewise.models.leave_request import LeaveRequest
from timewise.models.user import User
from timewise.schemas.analytics import (
    AdminAnalyticsResponse,
    DashboardResponse,
    DepartmentUsage,
    LeaveTypeUsage,
    MonthlyRequests,
    StatusCounts,
)
from timewise.schemas.result import ServiceResult
from timewise.services.guard import infrastructure_guard
from timewise.services.leave_request import _build_response, _with_owner

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from timewise.schemas.auth import AuthContext
    from timewise.schemas.leave_request import LeaveRequestResponse

logger = logging.getLogger(__name__)

_UPCOMING_LIMIT = 10
_UNASSIGNED_DEPARTMENT = "Unassigned"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _last_twelve_months(today: date) -> list[tuple[int, int]]:
    """(year, month) pairs for the current month and the eleven before it, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(12):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


async def _status_counts(session: AsyncSession, user_id: uuid.UUID | None = None) -> StatusCounts:
    query = select(col(LeaveRequest.status), func.count()).group_by(col(LeaveRequest.status))
    if user_id is not None:
        query = query.where(col(LeaveRequest.user_id) == user_id)
    rows = (await session.execute(query)).all()
    counts = {status: int(count) for status, count in rows}
    return StatusCounts(
        pending=counts.get(LeaveStatus.PENDING.value, 0),
        approved=counts.get(LeaveStatus.APPROVED.value, 0),
        rejected=counts.get(LeaveStatus.REJECTED.value, 0),
    )


async def _upcoming_approved(
    session: AsyncSession,
    today: date,
    user_id: uuid.UUID | None = None,
    limit: int = _UPCOMING_LIMIT,
) -> list[LeaveRequestResponse]:
    query = _with_owner().where(
        col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
        col(LeaveRequest.end_date) >= today,
    )
    if user_id is not None:
        query = query.where(col(LeaveRequest.user_id) == user_id)
    result = await session.execute(query.order_by(col(LeaveRequest.start_date)).limit(limit))
    return [_build_response(request, owner) for request, owner in result.all()]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@infrastructure_guard("Failed to load analytics")
async def admin_summary(
    session: AsyncSession,
    auth: AuthContext | None,
) -> ServiceResult[AdminAnalyticsResponse]:
    """Company-wide leave statistics (admin only)."""
    if auth is None or not auth.is_admin:
        return ServiceResult.unauthorized()

    today = date.today()

    total_employees = (
        await session.execute(
            select(func.count()).select_from(User).where(col(User.role) != UserRole.ADMIN.value)
        )
    ).scalar_one()
    total_requests = (await session.execute(select(func.count()).select_from(LeaveRequest))).scalar_one()

    year_start = datetime(today.year, 1, 1, tzinfo=UTC)
    requests_this_year = (
        await session.execute(
            select(func.count()).select_from(LeaveRequest).where(col(LeaveRequest.requested_at) >= year_start)
        )
    ).scalar_one()

    type_rows = (
        await session.execute(
            select(
                col(LeaveRequest.type),
                func.count(),
                func.coalesce(func.sum(col(LeaveRequest.days_requested)), 0),
            )
            .group_by(col(LeaveRequest.type))
            .order_by(col(LeaveRequest.type))
        )
    ).all()

    department_rows = (
        await session.execute(
            select(
                col(User.department),
                func.count(col(LeaveRequest.id)),
                func.coalesce(func.sum(col(LeaveRequest.days_requested)), 0),
            )
            .select_from(User)
            .join(LeaveRequest, col(LeaveRequest.user_id) == col(User.id), isouter=True)
            .where(col(User.role) != UserRole.ADMIN.value)
            .group_by(col(User.department))
        )
    ).all()
    per_department: Counter[str] = Counter()
    days_per_department: Counter[str] = Counter()
    for dep, n, d in department_rows:
        per_department[dep or _UNASSIGNED_DEPARTMENT] += int(n)
        days_per_department[dep or _UNASSIGNED_DEPARTMENT] += int(d)

    months = _last_twelve_months(today)
    oldest_year, oldest_month = months[0]
    requested = (
        await session.execute(
            select(col(LeaveRequest.requested_at)).where(
                col(LeaveRequest.requested_at) >= datetime(oldest_year, oldest_month, 1, tzinfo=UTC)
            )
        )
    ).scalars()
    per_month = Counter((ts.year, ts.month) for ts in requested)

    summary = AdminAnalyticsResponse(
        total_employees=total_employees,
        total_requests=total_requests,
        requests_this_year=requests_this_year,
        by_status=await _status_counts(session),
        by_type=[LeaveTypeUsage(type=t, requests=int(n), total_days=int(d)) for t, n, d in type_rows],
        by_department=[
            DepartmentUsage(department=dep, requests=per_department[dep], total_days=days_per_department[dep])
            for dep in sorted(per_department)
        ],
        monthly=[MonthlyRequests(month=f"{y:04d}-{m:02d}", requests=per_month.get((y, m), 0)) for y, m in months],
        upcoming=await _upcoming_approved(session, today),
    )
    logger.info("Admin analytics served to %s", auth.user_id)
    return ServiceResult.ok(summary)


@infrastructure_guard("Failed to load dashboard")
async def dashboard(
    session: AsyncSession,
    auth: AuthContext | None,
) -> ServiceResult[DashboardResponse]:
    """Leave overview for the calling user."""
    if auth is None:
        return ServiceResult.unauthorized()

    user = await session.get(User, auth.user_id)
    if user is None:
        return ServiceResult.not_found("User not found")

    today = date.today()
    days_taken = (
        await session.execute(
            select(func.coalesce(func.sum(col(LeaveRequest.days_requested)), 0)).where(
                col(LeaveRequest.user_id) == auth.user_id,
                col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
                col(LeaveRequest.start_date) >= date(today.year, 1, 1),
                col(LeaveRequest.start_date) <= date(today.year, 12, 31),
            )
        )
    ).scalar_one()

    return ServiceResult.ok(
        DashboardResponse(
            user_id=user.id,
            by_status=await _status_counts(session, auth.user_id),
            days_taken_this_year=int(days_taken),
            vacation_days_remaining=user.vacation_days,
            sick_days_remaining=user.sick_days,
            upcoming=await _upcoming_approved(session, today, auth.user_id, limit=5),
        )
    )


@infrastructure_guard("Failed to load calendar events")
async def calendar_events(
    session: AsyncSession,
    auth: AuthContext | None,
    year: int,
    month: int,
    *,
    owner_id: uuid.UUID | None = None,
    include_team: bool = False,
) -> ServiceResult[list[LeaveRequestResponse]]:
    """Requests that intersect the given month.

    Admins see one owner's requests, everyone's (``include_team``) or their
    own. Other users see their own requests plus, with ``include_team``, the
    approved requests of colleagues in their department.
    """
    if auth is None:
        return ServiceResult.unauthorized()
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        return ServiceResult.invalid("Valid month and year are required")

    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])
    query = _with_owner().where(
        col(LeaveRequest.start_date) <= last_day,
        col(LeaveRequest.end_date) >= first_day,
    )

    if auth.is_admin:
        if owner_id is not None:
            query = query.where(col(LeaveRequest.user_id) == owner_id)
        elif not include_team:
            query = query.where(col(LeaveRequest.user_id) == auth.user_id)
    else:
        caller = await session.get(User, auth.user_id)
        own = col(LeaveRequest.user_id) == auth.user_id
        if include_team and caller is not None and caller.department:
            query = query.where(
                or_(
                    own,
                    and_(
                        col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
                        col(User.department) == caller.department,
                    ),
                )
            )
        else:
            query = query.where(own)

    result = await session.execute(query.order_by(col(LeaveRequest.start_date)))
    return ServiceResult.ok([_build_response(request, owner) for request, owner in result.all()])
