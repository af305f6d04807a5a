"""Tests for email rendering and delivery."""

import logging
import smtplib
from unittest.mock import MagicMock, patch

import pytest

from greenpoll.errors import InternalError
from greenpoll.services.mailer import Mailer


class TestMailer:
    """Tests for Mailer."""

    def test_render_verification(self):
        html, text = Mailer().render("verify", {"username": "alice", "verify_id": "tok123", "url": "https://gp.test"})
        assert "alice" in html
        assert "https://gp.test/verify?verify_id=tok123" in text

    def test_html_is_escaped(self):
        html, _ = Mailer().render("verify", {"username": "<b>x</b>", "verify_id": "t", "url": "https://gp.test"})
        assert "<b>x</b>" not in html
        assert "&lt;b&gt;" in html

    def test_render_password_reset(self):
        _, text = Mailer().render("password_reset", {"reset_id": "reset123", "url": "https://gp.test"})
        assert "reset123" in text

    def test_build_message(self):
        message = Mailer().build_message("alice@example.com", "Hello", "<p>Hi</p>", "Hi")
        assert message["To"] == "alice@example.com"
        assert message["Subject"] == "Hello"
        assert message.get_body(("plain",)).get_content().strip() == "Hi"
        assert "<p>Hi</p>" in message.get_body(("html",)).get_content()

    def test_unconfigured_mail_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="greenpoll"):
            Mailer().send_verification_email("alice@example.com", "alice", "tok123")
        assert "EMAIL to alice@example.com" in caplog.text
        assert "tok123" in caplog.text

    def test_smtp_delivery(self):
        mailer = Mailer()
        message = mailer.build_message("alice@example.com", "Hi", "<p>Hi</p>", "Hi")
        smtp = MagicMock()
        with patch("greenpoll.services.mailer.get_settings") as get_settings, patch(
            "greenpoll.services.mailer.smtplib.SMTP"
        ) as smtp_cls:
            get_settings.return_value = MagicMock(
                email_configured=True,
                EMAIL_ADDRESS="app@example.com",
                EMAIL_APP_PASSWORD="secret",
                SMTP_HOST="smtp.example.com",
                SMTP_PORT=587,
            )
            smtp_cls.return_value.__enter__.return_value = smtp
            mailer.deliver(message)

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=20)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("app@example.com", "secret")
        smtp.send_message.assert_called_once_with(message)

    def test_send_failure_becomes_internal_error(self):
        mailer = Mailer()
        with patch.object(Mailer, "deliver", side_effect=smtplib.SMTPException("boom")):
            with pytest.raises(InternalError, match="Failed to send password reset email"):
                mailer.send_password_reset_email("alice@example.com", "reset123")
