# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from timewise.models.base import UUIDBase, now_utc
from timewise.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, table=True):
    """An employee's request to be absent over an inclusive date range."""

    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.Index("ix_leave_requests_user_dates", "user_id", "start_date", "end_date"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_requests_date_order"),
    )

    user_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    type: str = Field(max_length=20)
    start_date: date = Field(sa_type=sa.Date)
    end_date: date = Field(sa_type=sa.Date)
    reason: str | None = Field(default=None, max_length=500)
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "Pending"}
    )
    days_requested: int
    requested_at: datetime = Field(
        default_factory=now_utc,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    reviewed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    reviewed_by: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    review_note: str | None = Field(default=None, max_length=500)
