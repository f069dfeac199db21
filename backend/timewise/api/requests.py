# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Query, status

from timewise.api.deps import AuthDep
from timewise.db import SessionDep
from timewise.exceptions import raise_for_result
from timewise.schemas.leave_request import LeaveRequestPage, LeaveRequestResponse
from timewise.services import leave_request as leave_request_service

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    session: SessionDep,
    auth: AuthDep,
    payload: dict[str, Any] = Body(),
) -> LeaveRequestResponse:
    """Submit a new leave request for the caller."""
    return raise_for_result(await leave_request_service.create_leave_request(session, auth, payload))


@requests_router.get("", response_model=list[LeaveRequestResponse] | LeaveRequestPage)
async def list_leave_requests(
    session: SessionDep,
    auth: AuthDep,
    user_id: uuid.UUID | None = Query(default=None, alias="userId"),
    status_filter: str | None = Query(default=None, alias="status"),
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
) -> list[LeaveRequestResponse] | LeaveRequestPage:
    """List leave requests; non-admins only ever see their own."""
    return raise_for_result(
        await leave_request_service.list_leave_requests(
            session, auth, owner_id=user_id, status=status_filter, page=page, limit=limit
        )
    )


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request (owner or admin)."""
    return raise_for_result(await leave_request_service.get_leave_request(session, auth, request_id))


@requests_router.patch("/{request_id}", response_model=LeaveRequestResponse)
async def review_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: dict[str, Any] = Body(),
) -> LeaveRequestResponse:
    """Approve or reject a pending leave request (admin only)."""
    return raise_for_result(
        await leave_request_service.review_leave_request(session, auth, request_id, payload)
    )


@requests_router.put("/{request_id}/update", response_model=LeaveRequestResponse)
async def edit_own_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: dict[str, Any] = Body(),
) -> LeaveRequestResponse:
    """Edit one of the caller's pending leave requests."""
    return raise_for_result(
        await leave_request_service.edit_own_leave_request(session, auth, request_id, payload)
    )


@requests_router.put("/{request_id}/admin-update", response_model=LeaveRequestResponse)
async def admin_edit_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: dict[str, Any] = Body(),
) -> LeaveRequestResponse:
    """Edit any leave request, including its status (admin only)."""
    return raise_for_result(
        await leave_request_service.admin_edit_leave_request(session, auth, request_id, payload)
    )
