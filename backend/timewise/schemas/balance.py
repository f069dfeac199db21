# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from timewise.models.enums import LeaveType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class DeductionInput(BaseModel):
    """Body for a manual balance deduction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    leave_type: LeaveType
    days: int = Field(gt=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveBalance(BaseModel):
    """Remaining allotments of one user."""

    user_id: uuid.UUID
    vacation_days: int
    sick_days: int
