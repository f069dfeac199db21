# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query

from timewise.api.deps import AuthDep
from timewise.db import SessionDep
from timewise.exceptions import raise_for_result
from timewise.schemas.team import TeamResponse
from timewise.services import team as team_service

team_router = APIRouter(prefix="/team", tags=["team"])


@team_router.get("/department", response_model=TeamResponse)
async def department_team(
    session: SessionDep,
    auth: AuthDep,
    dept: str | None = Query(default=None),
) -> TeamResponse:
    """Colleagues in a department with their leave usage."""
    return raise_for_result(await team_service.team_members(session, auth, dept))
