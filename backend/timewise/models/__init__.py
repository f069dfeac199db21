from sqlmodel import SQLModel

from timewise.models.base import TimestampMixin, UUIDBase
from timewise.models.enums import LeaveStatus, LeaveType, UserRole
from timewise.models.leave_request import LeaveRequest
from timewise.models.user import User

__all__ = [
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "SQLModel",
    "TimestampMixin",
    "User",
    "UUIDBase",
    "UserRole",
]
