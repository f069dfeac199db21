# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from timewise.schemas.leave_request import LeaveRequestResponse


class StatusCounts(BaseModel):
    """Number of requests in each review state."""

    pending: int = 0
    approved: int = 0
    rejected: int = 0


class LeaveTypeUsage(BaseModel):
    type: str
    requests: int
    total_days: int


class DepartmentUsage(BaseModel):
    department: str
    requests: int
    total_days: int


class MonthlyRequests(BaseModel):
    month: str  # "YYYY-MM"
    requests: int


class AdminAnalyticsResponse(BaseModel):
    """Company-wide leave statistics."""

    total_employees: int
    total_requests: int
    requests_this_year: int
    by_status: StatusCounts
    by_type: list[LeaveTypeUsage]
    by_department: list[DepartmentUsage]
    monthly: list[MonthlyRequests]
    upcoming: list[LeaveRequestResponse]


class DashboardResponse(BaseModel):
    """Personal leave overview for the caller."""

    user_id: uuid.UUID
    by_status: StatusCounts
    days_taken_this_year: int
    vacation_days_remaining: int
    sick_days_remaining: int
    upcoming: list[LeaveRequestResponse]
