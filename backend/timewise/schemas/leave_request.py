# ruff: noqa: TC001, TC003
from __future__ import annotations

import re
import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from timewise.models.enums import LeaveStatus, LeaveType
from timewise.schemas.pagination import PaginationMeta

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class _CamelInput(BaseModel):
    """Accepts both camelCase (as sent by the web client) and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LeaveRequestInput(_CamelInput):
    """Body for submitting or editing a leave request."""

    type: LeaveType
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=500)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_calendar_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            msg = "Date must be in YYYY-MM-DD format"
            raise ValueError(msg)
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not _ISO_DATE.match(value):
            msg = "Date must be in YYYY-MM-DD format"
            raise ValueError(msg)
        try:
            return date.fromisoformat(value)
        except ValueError:
            msg = "Date is not a valid calendar date"
            raise ValueError(msg) from None


class AdminEditInput(LeaveRequestInput):
    """Body for an admin edit; may additionally move the request to any status."""

    status: LeaveStatus | None = None


class ReviewInput(_CamelInput):
    """Body for the one-shot review of a pending request."""

    status: LeaveStatus
    review_note: str | None = Field(default=None, max_length=500)

    @field_validator("status")
    @classmethod
    def _must_be_decision(cls, value: LeaveStatus) -> LeaveStatus:
        if value not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            msg = "Status must be either 'Approved' or 'Rejected'"
            raise ValueError(msg)
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class OwnerSummary(BaseModel):
    """Identity fields of the request owner, joined for display."""

    first_name: str
    last_name: str
    email: str


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    user_id: uuid.UUID
    type: LeaveType
    start_date: date
    end_date: date
    reason: str | None
    status: LeaveStatus
    days_requested: int
    requested_at: datetime
    reviewed_at: datetime | None
    reviewed_by: uuid.UUID | None
    review_note: str | None
    user: OwnerSummary


class LeaveRequestPage(BaseModel):
    """One page of leave requests plus pagination metadata."""

    items: list[LeaveRequestResponse]
    pagination: PaginationMeta
