# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel


class TeamMember(BaseModel):
    """A colleague in the caller's department with their leave usage."""

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    department: str | None
    role: str
    vacation_days: int
    sick_days: int
    used_vacation: int = 0
    used_sick: int = 0
    is_on_leave: bool = False
    leave_end_date: date | None = None


class TeamResponse(BaseModel):
    department: str
    members: list[TeamMember]
