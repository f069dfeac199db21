# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from timewise.models.base import TimestampMixin, UUIDBase
from timewise.models.enums import UserRole


class User(UUIDBase, TimestampMixin, table=True):
    """An employee account with its remaining leave allotments."""

    __tablename__ = "users"
    __table_args__ = (
        sa.CheckConstraint("vacation_days >= 0", name="ck_users_vacation_days_non_negative"),
        sa.CheckConstraint("sick_days >= 0", name="ck_users_sick_days_non_negative"),
        sa.CheckConstraint("role IN ('admin', 'user')", name="ck_users_role"),
    )

    email: str = Field(max_length=255, unique=True, index=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    department: str | None = Field(default=None, max_length=100)
    role: str = Field(default=UserRole.USER, max_length=20, sa_column_kwargs={"server_default": "user"})
    password_hash: str | None = Field(default=None, max_length=255)
    vacation_days: int = Field(default=20, sa_column_kwargs={"server_default": "20"})
    sick_days: int = Field(default=10, sa_column_kwargs={"server_default": "10"})
    password_reset_required: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    email_verified_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    reset_token: str | None = Field(default=None, max_length=255)
    reset_token_expiry: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
