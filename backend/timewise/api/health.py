import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from timewise.config import get_settings
from timewise.db import SessionDep
from timewise.services.mailer import SmtpMailer, get_mailer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service status plus the switches that change leave handling."""

    status: Literal["ok", "degraded"]
    app: str
    version: str
    environment: str
    database: Literal["up", "down"]
    balance_deduction: bool
    mail_delivery: Literal["smtp", "log", "memory"]


def _mail_delivery() -> Literal["smtp", "log", "memory"]:
    mailer = get_mailer()
    if not isinstance(mailer, SmtpMailer):
        return "memory"
    settings = get_settings()
    return "smtp" if settings.smtp_host and settings.smtp_from else "log"


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report whether the service can reach its database and how it handles leave."""
    settings = get_settings()
    database: Literal["up", "down"] = "up"

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database connectivity failed")
        database = "down"

    return HealthResponse(
        status="ok" if database == "up" else "degraded",
        app=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        balance_deduction=settings.deduct_balance_on_approval,
        mail_delivery=_mail_delivery(),
    )
