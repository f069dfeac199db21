# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlmodel import col

from timewise.config import get_settings
from timewise.models.base import now_utc
from timewise.models.enums import LeaveStatus, LeaveType
from timewise.models.leave_request import LeaveRequest
from timewise.models.user import User
from timewise.schemas.leave_request import (
    AdminEditInput,
    LeaveRequestInput,
    LeaveRequestPage,
    LeaveRequestResponse,
    OwnerSummary,
    ReviewInput,
)
from timewise.schemas.pagination import PaginationMeta, page_params
from timewise.schemas.result import ErrorKind, ServiceResult, describe_validation_error
from timewise.services.balance import apply_credit, apply_deduction, get_user_for_update
from timewise.services.guard import infrastructure_guard
from timewise.services.working_days import calculate_working_days

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Select

    from timewise.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

START_AFTER_END = "Start date must be before end date"
PAST_START = "Start date cannot be in the past for non-sick leave requests"
OVERLAPPING = "You have overlapping leave requests for these dates"
NOT_FOUND = "Leave request not found"
NOT_PENDING_REVIEW = "Can only review pending requests"
NOT_PENDING_EDIT = "Only pending requests can be edited"
NOT_OWNER_EDIT = "Unauthorized to edit this request"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_response(request: LeaveRequest, owner: User) -> LeaveRequestResponse:
    """Map a request and its owner to the response schema."""
    return LeaveRequestResponse(
        id=request.id,
        user_id=request.user_id,
        type=LeaveType(request.type),
        start_date=request.start_date,
        end_date=request.end_date,
        reason=request.reason,
        status=LeaveStatus(request.status),
        days_requested=request.days_requested,
        requested_at=request.requested_at,
        reviewed_at=request.reviewed_at,
        reviewed_by=request.reviewed_by,
        review_note=request.review_note,
        user=OwnerSummary(first_name=owner.first_name, last_name=owner.last_name, email=owner.email),
    )


def _with_owner() -> Select[tuple[LeaveRequest, User]]:
    return select(LeaveRequest, User).join(User, col(LeaveRequest.user_id) == col(User.id))


async def _get_request_with_owner(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> tuple[LeaveRequest, User] | None:
    """Fetch a request joined with its owner, optionally locking the request row."""
    query = _with_owner().where(col(LeaveRequest.id) == request_id)
    if for_update:
        query = query.with_for_update(of=LeaveRequest).execution_options(populate_existing=True)
    result = await session.execute(query)
    row = result.one_or_none()
    if row is None:
        return None
    return row[0], row[1]


def _parse(model: type[M], data: Mapping[str, Any] | M) -> M | str:
    """Validate raw input against ``model``; return a message on failure."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        return describe_validation_error(exc)


def _check_past_date(leave_type: LeaveType, start_date: date, today: date) -> str | None:
    """Non-sick leave may not start before today; sick leave may be backdated a bounded number of days."""
    if leave_type == LeaveType.SICK:
        backdate_days = get_settings().sick_leave_backdate_days
        if start_date < today - timedelta(days=backdate_days):
            return f"Sick leave cannot be requested for dates more than {backdate_days} days in the past"
        return None
    if start_date < today:
        return PAST_START
    return None


async def _has_overlap(
    session: AsyncSession,
    user_id: uuid.UUID,
    start_date: date,
    end_date: date,
    exclude_request_id: uuid.UUID | None = None,
) -> bool:
    """True if the user has a non-rejected request sharing at least one day with the range."""
    query = select(col(LeaveRequest.id)).where(
        col(LeaveRequest.user_id) == user_id,
        col(LeaveRequest.status) != LeaveStatus.REJECTED.value,
        col(LeaveRequest.start_date) <= end_date,
        col(LeaveRequest.end_date) >= start_date,
    )
    if exclude_request_id is not None:
        query = query.where(col(LeaveRequest.id) != exclude_request_id)

    result = await session.execute(query.limit(1))
    return result.first() is not None


def _apply_fields(request: LeaveRequest, payload: LeaveRequestInput) -> None:
    request.type = payload.type.value
    request.start_date = payload.start_date
    request.end_date = payload.end_date
    request.reason = payload.reason
    request.days_requested = calculate_working_days(payload.start_date, payload.end_date)


async def _reconcile_balance(
    session: AsyncSession,
    request: LeaveRequest,
    payload: LeaveRequestInput,
    target_status: str,
) -> ServiceResult[LeaveRequestResponse] | None:
    """Keep the owner's allotments in step with an admin edit.

    An approved request has already been charged, so leaving Approved (or
    changing the dates or type while staying Approved) credits the old charge
    back first. Ending up Approved charges the edited range. Flushes only;
    returns a failed result when the new charge does not fit.
    """
    was_approved = request.status == LeaveStatus.APPROVED.value
    if was_approved:
        credit = await apply_credit(session, request.user_id, LeaveType(request.type), request.days_requested)
        if not credit.success:
            return ServiceResult.fail(credit.error_kind or ErrorKind.VALIDATION, credit.error or "")

    if target_status == LeaveStatus.APPROVED.value:
        days = calculate_working_days(payload.start_date, payload.end_date)
        deduction = await apply_deduction(session, request.user_id, payload.type, days)
        if not deduction.success:
            return ServiceResult.fail(deduction.error_kind or ErrorKind.VALIDATION, deduction.error or "")
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@infrastructure_guard("Failed to create leave request")
async def create_leave_request(
    session: AsyncSession,
    auth: AuthContext | None,
    data: Mapping[str, Any] | LeaveRequestInput,
) -> ServiceResult[LeaveRequestResponse]:
    """Submit a new Pending leave request on behalf of the caller.

    Checks run in a fixed order and the first failure wins:
    1. caller is authenticated
    2. input parses (leave type, YYYY-MM-DD dates, reason length)
    3. start date is not after end date
    4. past-date rule for the leave type
    5. no overlap with the caller's non-rejected requests

    The owner row is locked before the overlap check so two concurrent
    submissions for the same user are serialised.
    """
    if auth is None:
        return ServiceResult.unauthorized()

    payload = _parse(LeaveRequestInput, data)
    if isinstance(payload, str):
        logger.info("Rejected leave request from %s: %s", auth.user_id, payload)
        return ServiceResult.invalid(payload)

    if payload.start_date > payload.end_date:
        return ServiceResult.invalid(START_AFTER_END)

    past_error = _check_past_date(payload.type, payload.start_date, date.today())
    if past_error is not None:
        return ServiceResult.invalid(past_error)

    owner = await get_user_for_update(session, auth.user_id)
    if owner is None:
        return ServiceResult.not_found("User not found")

    if await _has_overlap(session, auth.user_id, payload.start_date, payload.end_date):
        logger.info(
            "Overlapping leave request from %s for %s..%s", auth.user_id, payload.start_date, payload.end_date
        )
        return ServiceResult.invalid(OVERLAPPING)

    leave_request = LeaveRequest(
        user_id=auth.user_id,
        type=payload.type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        status=LeaveStatus.PENDING.value,
        days_requested=calculate_working_days(payload.start_date, payload.end_date),
        requested_at=now_utc(),
    )
    session.add(leave_request)
    await session.commit()

    logger.info(
        "Leave request %s created by %s: %s %s..%s (%d working days)",
        leave_request.id,
        auth.user_id,
        leave_request.type,
        leave_request.start_date,
        leave_request.end_date,
        leave_request.days_requested,
    )
    return ServiceResult.ok(_build_response(leave_request, owner))


@infrastructure_guard("Failed to fetch leave requests")
async def list_leave_requests(
    session: AsyncSession,
    auth: AuthContext | None,
    *,
    owner_id: uuid.UUID | None = None,
    status: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> ServiceResult[list[LeaveRequestResponse] | LeaveRequestPage]:
    """List requests, most recently submitted first.

    Non-admin callers only ever see their own requests; any ``owner_id`` they
    pass is ignored. Status ``"all"`` (or no status) applies no status filter.
    Pagination applies only when both ``page`` and ``limit`` are positive.
    """
    if auth is None:
        return ServiceResult.unauthorized()

    effective_owner = owner_id if auth.is_admin else auth.user_id

    filters = []
    if effective_owner is not None:
        filters.append(col(LeaveRequest.user_id) == effective_owner)
    if status and status != "all":
        try:
            filters.append(col(LeaveRequest.status) == LeaveStatus(status).value)
        except ValueError:
            return ServiceResult.invalid(f"Invalid status filter: {status}")

    query = _with_owner().where(*filters).order_by(col(LeaveRequest.requested_at).desc())

    paging = page_params(page, limit)
    if paging is not None:
        page_no, size = paging
        count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*filters))
        total = count_result.scalar_one()
        result = await session.execute(query.offset((page_no - 1) * size).limit(size))
        items = [_build_response(request, owner) for request, owner in result.all()]
        logger.debug("Listed %d of %d leave requests for %s", len(items), total, auth.user_id)
        return ServiceResult.ok(
            LeaveRequestPage(items=items, pagination=PaginationMeta.build(total=total, page=page_no, limit=size))
        )

    result = await session.execute(query)
    return ServiceResult.ok([_build_response(request, owner) for request, owner in result.all()])


@infrastructure_guard("Failed to fetch leave request")
async def get_leave_request(
    session: AsyncSession,
    auth: AuthContext | None,
    request_id: uuid.UUID,
) -> ServiceResult[LeaveRequestResponse]:
    """Fetch one request. Visible to its owner and to admins."""
    if auth is None:
        return ServiceResult.unauthorized()

    row = await _get_request_with_owner(session, request_id)
    if row is None:
        return ServiceResult.not_found(NOT_FOUND)

    leave_request, owner = row
    if not auth.is_admin and leave_request.user_id != auth.user_id:
        logger.warning("User %s tried to read leave request %s of %s", auth.user_id, request_id, owner.id)
        return ServiceResult.unauthorized()

    return ServiceResult.ok(_build_response(leave_request, owner))


@infrastructure_guard("Failed to review leave request")
async def review_leave_request(
    session: AsyncSession,
    auth: AuthContext | None,
    request_id: uuid.UUID,
    data: Mapping[str, Any] | ReviewInput,
) -> ServiceResult[LeaveRequestResponse]:
    """Approve or reject a Pending request (admin only, one-shot).

    A request that has already been reviewed cannot be reviewed again; an
    admin edit is the only way to change a decided request. Approval deducts
    the owner's balance in the same transaction when enabled in settings.
    """
    if auth is None or not auth.is_admin:
        return ServiceResult.unauthorized()

    payload = _parse(ReviewInput, data)
    if isinstance(payload, str):
        return ServiceResult.invalid(payload)

    row = await _get_request_with_owner(session, request_id, for_update=True)
    if row is None:
        return ServiceResult.not_found(NOT_FOUND)

    leave_request, owner = row
    if leave_request.status != LeaveStatus.PENDING.value:
        logger.info("Refused second review of leave request %s (status %s)", request_id, leave_request.status)
        return ServiceResult.conflict(NOT_PENDING_REVIEW)

    if payload.status == LeaveStatus.APPROVED and get_settings().deduct_balance_on_approval:
        deduction = await apply_deduction(
            session, leave_request.user_id, LeaveType(leave_request.type), leave_request.days_requested
        )
        if not deduction.success:
            return ServiceResult.fail(deduction.error_kind or ErrorKind.VALIDATION, deduction.error or "")

    leave_request.status = payload.status.value
    leave_request.review_note = payload.review_note
    leave_request.reviewed_at = now_utc()
    leave_request.reviewed_by = auth.user_id
    await session.commit()

    logger.info("Leave request %s %s by %s", request_id, leave_request.status, auth.user_id)
    return ServiceResult.ok(_build_response(leave_request, owner))


@infrastructure_guard("Failed to update leave request")
async def edit_own_leave_request(
    session: AsyncSession,
    auth: AuthContext | None,
    request_id: uuid.UUID,
    data: Mapping[str, Any] | LeaveRequestInput,
) -> ServiceResult[LeaveRequestResponse]:
    """Let an owner rewrite a still-Pending request.

    The submission rules are applied again and the working-day count is
    recomputed from the new range; review metadata is cleared.
    """
    if auth is None:
        return ServiceResult.unauthorized()

    row = await _get_request_with_owner(session, request_id, for_update=True)
    if row is None:
        return ServiceResult.not_found(NOT_FOUND)

    leave_request, owner = row
    if leave_request.user_id != auth.user_id:
        logger.warning("User %s tried to edit leave request %s of %s", auth.user_id, request_id, owner.id)
        return ServiceResult.unauthorized(NOT_OWNER_EDIT)
    if leave_request.status != LeaveStatus.PENDING.value:
        return ServiceResult.conflict(NOT_PENDING_EDIT)

    payload = _parse(LeaveRequestInput, data)
    if isinstance(payload, str):
        return ServiceResult.invalid(payload)
    if payload.start_date > payload.end_date:
        return ServiceResult.invalid(START_AFTER_END)
    past_error = _check_past_date(payload.type, payload.start_date, date.today())
    if past_error is not None:
        return ServiceResult.invalid(past_error)

    owner = await get_user_for_update(session, auth.user_id) or owner
    if await _has_overlap(session, auth.user_id, payload.start_date, payload.end_date, request_id):
        return ServiceResult.invalid(OVERLAPPING)

    _apply_fields(leave_request, payload)
    leave_request.reviewed_at = None
    leave_request.reviewed_by = None
    await session.commit()

    logger.info("Leave request %s updated by owner %s", request_id, auth.user_id)
    return ServiceResult.ok(_build_response(leave_request, owner))


@infrastructure_guard("Failed to update leave request")
async def admin_edit_leave_request(
    session: AsyncSession,
    auth: AuthContext | None,
    request_id: uuid.UUID,
    data: Mapping[str, Any] | AdminEditInput,
) -> ServiceResult[LeaveRequestResponse]:
    """Let an admin rewrite any request, whatever its status.

    A supplied status that differs from the current one is applied and the
    caller is stamped as reviewer. Moving a request back to Pending clears the
    review metadata instead, so the owner can edit it again. With ledger
    deduction on, the owner's balance always reflects exactly one charge per
    approved request; a charge that no longer fits fails the whole edit.
    """
    if auth is None or not auth.is_admin:
        return ServiceResult.unauthorized()

    row = await _get_request_with_owner(session, request_id, for_update=True)
    if row is None:
        return ServiceResult.not_found(NOT_FOUND)
    leave_request, owner = row
    original_status = leave_request.status

    payload = _parse(AdminEditInput, data)
    if isinstance(payload, str):
        return ServiceResult.invalid(payload)
    if payload.start_date > payload.end_date:
        return ServiceResult.invalid(START_AFTER_END)

    target_status = payload.status.value if payload.status is not None else leave_request.status
    if target_status != LeaveStatus.REJECTED.value:
        owner = await get_user_for_update(session, leave_request.user_id) or owner
        if await _has_overlap(session, leave_request.user_id, payload.start_date, payload.end_date, request_id):
            return ServiceResult.invalid(OVERLAPPING)

    if get_settings().deduct_balance_on_approval:
        ledger_error = await _reconcile_balance(session, leave_request, payload, target_status)
        if ledger_error is not None:
            await session.rollback()
            return ledger_error

    _apply_fields(leave_request, payload)
    if target_status != leave_request.status:
        leave_request.status = target_status
        if target_status == LeaveStatus.PENDING.value:
            leave_request.reviewed_at = None
            leave_request.reviewed_by = None
            leave_request.review_note = None
        else:
            leave_request.reviewed_at = now_utc()
            leave_request.reviewed_by = auth.user_id
    await session.commit()

    logger.info(
        "Leave request %s updated by admin %s (status %s -> %s)",
        request_id,
        auth.user_id,
        original_status,
        leave_request.status,
    )
    return ServiceResult.ok(_build_response(leave_request, owner))
