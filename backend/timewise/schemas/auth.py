# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from timewise.models.enums import UserRole


class AuthContext(BaseModel):
    """Identity of the caller, passed explicitly into every service call."""

    user_id: uuid.UUID
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
