"""邮件发送测试"""
from unittest.mock import AsyncMock, patch

import pytest

from config.settings import settings
from utils import mailer


@pytest.fixture
def smtp_configured(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "SMTP_USER", "pulse")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "secret")


@pytest.mark.asyncio
async def test_send_email_skipped_when_unconfigured(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        assert await mailer.send_email("a@example.com", "hi", "body") is False
    mock_send.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_email_uses_smtp_settings(smtp_configured):
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        assert await mailer.send_email("a@example.com", "hi", "body") is True

    msg = mock_send.call_args.args[0]
    assert msg["To"] == "a@example.com"
    assert msg["Subject"] == "hi"
    assert mock_send.call_args.kwargs["hostname"] == "smtp.example.com"
    assert mock_send.call_args.kwargs["username"] == "pulse"


@pytest.mark.asyncio
async def test_send_failure_returns_false(smtp_configured):
    with patch("aiosmtplib.send", new_callable=AsyncMock, side_effect=OSError("connection refused")):
        assert await mailer.send_email("a@example.com", "hi", "body") is False


@pytest.mark.asyncio
async def test_urgent_notification_subject(smtp_configured):
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        ok = await mailer.send_notification_email("pm@example.com", "URGENT: late", "Project")

    assert ok is True
    assert mock_send.call_args.args[0]["Subject"] == "[ProjectPulse] Urgent: Project update"


@pytest.mark.asyncio
async def test_notification_without_recipient(smtp_configured):
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        assert await mailer.send_notification_email(None, "hello") is False
    mock_send.assert_not_awaited()


@pytest.mark.asyncio
async def test_approval_reminder_body(smtp_configured):
    with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        await mailer.send_approval_reminder_email(
            "dir@example.com", "project", "Gemini", "P1", "http://x/approvals", 3
        )

    msg = mock_send.call_args.args[0]
    assert msg["Subject"] == "[ProjectPulse] Reminder: project awaiting your approval"
    plain = msg.get_payload()[0].get_payload(decode=True).decode("utf-8")
    assert "3 day(s)" in plain
