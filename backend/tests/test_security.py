"""Tests for password hashing, temporary credentials and outbound mail."""

from __future__ import annotations

import string
from typing import TYPE_CHECKING

import pytest

from timewise.config import get_settings
from timewise.security import generate_temporary_password, hash_password, verify_password
from timewise.services.mailer import OutgoingEmail, SmtpMailer, welcome_email

if TYPE_CHECKING:
    from timewise.services.mailer import InMemoryMailer


def test_hash_and_verify_password() -> None:
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_password_with_garbage_hash() -> None:
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_temporary_password_has_every_character_class() -> None:
    for _ in range(20):
        password = generate_temporary_password()
        assert len(password) == 12
        assert any(c in string.ascii_lowercase for c in password)
        assert any(c in string.ascii_uppercase for c in password)
        assert any(c in string.digits for c in password)
        assert any(c in "!@#$%^&*" for c in password)


def test_temporary_passwords_differ() -> None:
    assert len({generate_temporary_password() for _ in range(10)}) == 10


def test_welcome_email_contents() -> None:
    message = welcome_email("new@example.com", "Nora", "Tmp#Pass123")
    assert message.to == "new@example.com"
    assert "Welcome to Timewise HRMS" in message.subject
    assert "Hi Nora" in message.body
    assert "Tmp#Pass123" in message.body


async def test_in_memory_mailer_records(mailer: InMemoryMailer) -> None:
    await mailer.send(OutgoingEmail(to="a@example.com", subject="s", body="b"))
    assert [m.to for m in mailer.outbox] == ["a@example.com"]


async def test_smtp_mailer_logs_when_unconfigured(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(get_settings(), "smtp_host", None)
    caplog.set_level("INFO", logger="timewise.services.mailer")
    await SmtpMailer().send(OutgoingEmail(to="a@example.com", subject="Hello", body="there"))
    assert "SMTP not configured" in caplog.text
    assert "Hello" in caplog.text
