# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from timewise.models.enums import UserRole
from timewise.schemas.pagination import PaginationMeta

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateEmployeeRequest(BaseModel):
    """Body for adding an employee to the directory."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    department: str | None = Field(default=None, max_length=100)
    role: UserRole = UserRole.USER
    vacation_days: int | None = Field(default=None, ge=0)
    sick_days: int | None = Field(default=None, ge=0)


class UpdateEmployeeRequest(BaseModel):
    """Body for a partial update of an employee record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    department: str | None = Field(default=None, max_length=100)
    role: UserRole | None = None
    password: str | None = Field(default=None, min_length=6, max_length=72)
    vacation_days: int | None = Field(default=None, ge=0)
    sick_days: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    department: str | None
    role: UserRole
    vacation_days: int
    sick_days: int
    created_at: datetime


class CreatedEmployeeResponse(EmployeeResponse):
    """A newly created employee, carrying the one-time temporary password."""

    temporary_password: str


class EmployeePage(BaseModel):
    """One page of employees plus pagination metadata."""

    items: list[EmployeeResponse]
    pagination: PaginationMeta
