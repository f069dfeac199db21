from __future__ import annotations

import enum


class UserRole(enum.StrEnum):
    """Access level of an account."""

    ADMIN = "admin"
    USER = "user"


class LeaveType(enum.StrEnum):
    """Kind of leave an employee can request."""

    ANNUAL = "Annual"
    SICK = "Sick"
    UNPAID = "Unpaid"
    OTHER = "Other"


class LeaveStatus(enum.StrEnum):
    """Review state of a leave request."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
