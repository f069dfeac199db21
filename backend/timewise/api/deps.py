# ruff: noqa: B008
from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import Depends, Header

from timewise.exceptions import UnauthorizedError
from timewise.models.enums import UserRole
from timewise.schemas.auth import AuthContext

logger = logging.getLogger(__name__)


async def get_auth_context(
    x_user_id: str | None = Header(default=None),
    x_role: str | None = Header(default=None),
) -> AuthContext | None:
    """Resolve the caller from the dev identity headers.

    Returns None when no usable identity is present; services treat that as
    an unauthenticated caller.
    """
    if not x_user_id:
        return None
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        logger.warning("Ignoring malformed X-User-Id header")
        return None
    role = UserRole.ADMIN if x_role == UserRole.ADMIN.value else UserRole.USER
    return AuthContext(user_id=user_id, role=role)


AuthDep = Annotated[AuthContext | None, Depends(get_auth_context)]


async def require_admin(auth: AuthDep) -> AuthContext:
    """Require an authenticated admin caller."""
    if auth is None or not auth.is_admin:
        raise UnauthorizedError()
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]
