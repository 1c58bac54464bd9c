import smtplib
from unittest.mock import MagicMock, patch

import pytest

from common.utils.email import (
    SMTP_NOT_CONFIGURED,
    open_smtp_connection,
    send_bulk_credentials_emails,
    send_credentials_email,
    send_email,
    send_hackathon_registration_email,
    send_member_removal_email,
)


@pytest.fixture
def smtp_env(monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_PORT", "465")
    monkeypatch.setenv("SMTP_USER", "club@example.com")
    monkeypatch.setenv("SMTP_PASS", "secret")


@pytest.fixture
def no_smtp_env(monkeypatch):
    for key in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS"):
        monkeypatch.setenv(key, "")


def test_send_email_without_configuration_does_not_raise(no_smtp_env):
    result = send_email("a@b.co", "Hi", "<p>Hi</p>")
    assert result == {"success": False, "error": SMTP_NOT_CONFIGURED}


@patch("common.utils.email.open_smtp_connection")
def test_send_email_success(mock_open, smtp_env):
    smtp = MagicMock()
    mock_open.return_value = smtp

    result = send_email("a@b.co", "Hi", "<p>Hi</p>", "Hi")

    assert result["success"] is True
    assert result["messageId"]
    msg = smtp.send_message.call_args[0][0]
    assert msg["To"] == "a@b.co"
    assert msg["Subject"] == "Hi"
    smtp.quit.assert_called_once()


@patch("common.utils.email.open_smtp_connection")
def test_send_email_smtp_failure_returns_error(mock_open, smtp_env):
    mock_open.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

    result = send_email("a@b.co", "Hi", "<p>Hi</p>")

    assert result["success"] is False
    assert "bad credentials" in result["error"]


@patch("common.utils.email.smtplib.SMTP_SSL")
def test_port_465_uses_ssl(mock_ssl):
    open_smtp_connection({"host": "h", "port": 465, "user": "u", "password": "p"})
    mock_ssl.assert_called_once()
    mock_ssl.return_value.login.assert_called_once_with("u", "p")


@patch("common.utils.email.smtplib.SMTP")
def test_other_ports_use_starttls(mock_smtp):
    open_smtp_connection({"host": "h", "port": 587, "user": "u", "password": "p"})
    mock_smtp.return_value.starttls.assert_called_once()
    mock_smtp.return_value.login.assert_called_once_with("u", "p")


@patch("common.utils.email.send_email")
def test_credentials_email_contains_login(mock_send):
    mock_send.return_value = {"success": True, "messageId": "<1@x>"}

    send_credentials_email("a@b.co", "Asha Rao", "asha", "asha@1234")

    kwargs = mock_send.call_args.kwargs
    assert kwargs["to"] == "a@b.co"
    assert "asha@1234" in kwargs["html_body"]
    assert "asha@1234" in kwargs["text_body"]


@patch("common.utils.email.send_email")
def test_credentials_email_escapes_html(mock_send):
    mock_send.return_value = {"success": True, "messageId": "<1@x>"}

    send_credentials_email("a@b.co", "<script>", "asha", "pw")

    assert "<script>" not in mock_send.call_args.kwargs["html_body"]


@patch("common.utils.email.time.sleep")
@patch("common.utils.email.send_credentials_email")
def test_bulk_send_pauses_between_messages(mock_send, mock_sleep):
    mock_send.side_effect = [{"success": True, "messageId": "1"}, {"success": False, "error": "nope"}]
    members = [
        {"email": "a@b.co", "name": "A", "username": "a", "password": "p1"},
        {"email": "c@d.co", "name": "C", "username": "c", "password": "p2"},
    ]

    results = send_bulk_credentials_emails(members)

    assert [r["success"] for r in results] == [True, False]
    assert results[1]["email"] == "c@d.co"
    mock_sleep.assert_called_once_with(1.0)


@patch("common.utils.email.send_email")
def test_team_registration_email_mentions_team(mock_send):
    mock_send.return_value = {"success": True, "messageId": "1"}

    send_hackathon_registration_email("a@b.co", "Asha", "team", team_name="Null Pointers", member_count=3)

    kwargs = mock_send.call_args.kwargs
    assert "Null Pointers" in kwargs["html_body"]
    assert "3 members" in kwargs["text_body"]


@patch("common.utils.email.send_email")
def test_individual_registration_email(mock_send):
    mock_send.return_value = {"success": True, "messageId": "1"}

    send_hackathon_registration_email("a@b.co", "Asha", "individual")

    assert "Individual" in mock_send.call_args.kwargs["html_body"]


@patch("common.utils.email.send_email")
def test_removal_email_requires_address(mock_send):
    result = send_member_removal_email("", "Asha")
    assert result["success"] is False
    mock_send.assert_not_called()
