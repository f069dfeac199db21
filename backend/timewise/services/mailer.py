from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from timewise.config import get_settings

logger = logging.getLogger(__name__)


class OutgoingEmail(BaseModel):
    """A plain-text message addressed to one recipient."""

    to: str
    subject: str
    body: str


@runtime_checkable
class Mailer(Protocol):
    """Interface for outbound mail delivery."""

    async def send(self, message: OutgoingEmail) -> None:
        """Deliver a message. Raises on delivery failure."""
        ...


class SmtpMailer:
    """Delivers mail over SMTP; logs the message instead when SMTP is not configured."""

    async def send(self, message: OutgoingEmail) -> None:
        await asyncio.to_thread(self._send_sync, message)

    def _send_sync(self, message: OutgoingEmail) -> None:
        settings = get_settings()
        if not settings.smtp_host or not settings.smtp_from:
            logger.warning("SMTP not configured; logging email instead of sending")
            logger.info("Email to %s | %s\n%s", message.to, message.subject, message.body)
            return

        email = EmailMessage()
        email["Subject"] = message.subject
        email["From"] = formataddr((settings.smtp_from_name or settings.app_name, settings.smtp_from))
        email["To"] = message.to
        email.set_content(message.body)

        smtp_class = smtplib.SMTP_SSL if settings.smtp_use_ssl else smtplib.SMTP
        with smtp_class(settings.smtp_host, settings.smtp_port, timeout=15) as smtp:
            if settings.smtp_use_tls and not settings.smtp_use_ssl:
                smtp.starttls()
            if settings.smtp_username:
                smtp.login(settings.smtp_username, settings.smtp_password or "")
            smtp.send_message(email)
        logger.info("Email sent to %s: %s", message.to, message.subject)


class InMemoryMailer:
    """Collects messages instead of sending them."""

    def __init__(self) -> None:
        self.outbox: list[OutgoingEmail] = []

    async def send(self, message: OutgoingEmail) -> None:
        self.outbox.append(message)


_mailer: Mailer = SmtpMailer()


def get_mailer() -> Mailer:
    """Return the active mailer."""
    return _mailer


def set_mailer(mailer: Mailer) -> None:
    """Override the mailer (for testing or production wiring)."""
    global _mailer
    _mailer = mailer


def welcome_email(to: str, first_name: str, temporary_password: str) -> OutgoingEmail:
    """Build the account welcome message carrying the temporary password."""
    app_name = get_settings().app_name
    body = (
        f"Hi {first_name},\n\n"
        f"An account has been created for you on {app_name}.\n\n"
        f"Email: {to}\n"
        f"Temporary password: {temporary_password}\n\n"
        "You will be asked to choose a new password the first time you sign in.\n"
    )
    return OutgoingEmail(to=to, subject=f"Welcome to {app_name} - Your Account Details", body=body)
