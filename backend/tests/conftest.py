from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from timewise.db import get_session
from timewise.main import app
from timewise.models import SQLModel, User, UserRole
from timewise.services.mailer import InMemoryMailer, SmtpMailer, set_mailer

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create an engine over a fresh database for each test.

    Uses ``DATABASE_URL`` when set (e.g. a PostgreSQL service in CI), otherwise
    a throwaway SQLite file.
    """
    url = os.environ.get("DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'timewise.db'}"
    _engine = create_async_engine(url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a session on the per-test database."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def mailer() -> Iterator[InMemoryMailer]:
    """Capture outgoing mail for every test."""
    outbox = InMemoryMailer()
    set_mailer(outbox)
    yield outbox
    set_mailer(SmtpMailer())


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory that persists a user; keyword arguments override the defaults."""

    async def _make_user(**overrides: Any) -> User:
        suffix = uuid.uuid4().hex[:8]
        fields: dict[str, Any] = {
            "email": f"user-{suffix}@example.com",
            "first_name": "Test",
            "last_name": f"User {suffix}",
            "role": UserRole.USER.value,
            "vacation_days": 20,
            "sick_days": 10,
        }
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user
