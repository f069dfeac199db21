from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Concatenate, ParamSpec, TypeVar

from timewise.schemas.result import ErrorKind, ServiceResult

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R", bound=ServiceResult[Any])


def infrastructure_guard(
    message: str,
) -> Callable[
    [Callable[Concatenate[AsyncSession, P], Awaitable[R]]],
    Callable[Concatenate[AsyncSession, P], Awaitable[R]],
]:
    """Convert unexpected exceptions in a service operation into a generic failure.

    The wrapped coroutine must take the session as its first argument. On an
    unexpected exception the session is rolled back, the cause is logged with
    its traceback, and only ``message`` reaches the caller.
    """

    def decorator(
        func: Callable[Concatenate[AsyncSession, P], Awaitable[R]],
    ) -> Callable[Concatenate[AsyncSession, P], Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(session: AsyncSession, *args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(session, *args, **kwargs)
            except Exception:
                logger.exception("%s: unexpected error in %s", message, func.__qualname__)
                try:
                    await session.rollback()
                except Exception:
                    logger.exception("Rollback failed after error in %s", func.__qualname__)
                return ServiceResult.fail(ErrorKind.INTERNAL, message)  # type: ignore[return-value]

        return wrapper

    return decorator
