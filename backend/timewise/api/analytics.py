# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from timewise.api.deps import AuthDep
from timewise.db import SessionDep
from timewise.exceptions import raise_for_result
from timewise.schemas.analytics import AdminAnalyticsResponse, DashboardResponse
from timewise.schemas.leave_request import LeaveRequestResponse
from timewise.services import analytics as analytics_service

analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])
calendar_router = APIRouter(prefix="/calendar", tags=["analytics"])


@analytics_router.get("/admin", response_model=AdminAnalyticsResponse)
async def admin_analytics(session: SessionDep, auth: AuthDep) -> AdminAnalyticsResponse:
    """Company-wide leave statistics (admin only)."""
    return raise_for_result(await analytics_service.admin_summary(session, auth))


@analytics_router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(session: SessionDep, auth: AuthDep) -> DashboardResponse:
    """Leave overview for the caller."""
    return raise_for_result(await analytics_service.dashboard(session, auth))


@calendar_router.get("/events", response_model=list[LeaveRequestResponse])
async def calendar_events(
    session: SessionDep,
    auth: AuthDep,
    year: int = Query(),
    month: int = Query(),
    user_id: uuid.UUID | None = Query(default=None, alias="userId"),
    include_team: bool = Query(default=False, alias="includeTeam"),
) -> list[LeaveRequestResponse]:
    """Leave requests intersecting a calendar month."""
    return raise_for_result(
        await analytics_service.calendar_events(
            session, auth, year, month, owner_id=user_id, include_team=include_team
        )
    )
