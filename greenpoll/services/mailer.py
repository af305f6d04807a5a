"""Outgoing email: renders a template pair and sends it over SMTP."""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, select_autoescape

from greenpoll.config import get_settings
from greenpoll.errors import InternalError

logger = logging.getLogger("greenpoll")


class Mailer:
    """Sends templated emails from the app account.

    Each template is a pair of files in ``EMAIL_TEMPLATE_DIR``:
    ``<name>.html`` and ``<name>.txt``. When no SMTP credentials are
    configured the message is logged instead of sent.
    """

    def __init__(self) -> None:
        settings = get_settings()
        self.env = Environment(
            loader=FileSystemLoader(settings.EMAIL_TEMPLATE_DIR),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, context: dict[str, str]) -> tuple[str, str]:
        """Render the (html, text) bodies of a template."""
        html = self.env.get_template(f"{template_name}.html").render(**context)
        text = self.env.get_template(f"{template_name}.txt").render(**context)
        return html, text

    def build_message(self, email_to: str, subject: str, html: str, text: str) -> EmailMessage:
        settings = get_settings()
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((settings.EMAIL_SENDER_NAME, settings.EMAIL_ADDRESS or "noreply@localhost"))
        message["To"] = email_to
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    def deliver(self, message: EmailMessage) -> None:
        settings = get_settings()
        if not settings.email_configured:
            logger.info("EMAIL to %s: %s\n%s", message["To"], message["Subject"], message.get_body(("plain",)).get_content())
            return

        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=20) as server:
            server.starttls()
            server.login(settings.EMAIL_ADDRESS, settings.EMAIL_APP_PASSWORD)
            server.send_message(message)

    def send_template(self, email_to: str, subject: str, template_name: str, context: dict[str, str]) -> None:
        """Render ``template_name`` with ``context`` and send it to ``email_to``."""
        html, text = self.render(template_name, context)
        self.deliver(self.build_message(email_to, subject, html, text))

    def _send_or_fail(self, failure_message: str, *args) -> None:
        try:
            self.send_template(*args)
        except (smtplib.SMTPException, OSError, TemplateError) as e:
            logger.exception("%s", failure_message)
            raise InternalError(failure_message) from e

    def send_verification_email(self, email_to: str, username: str, verify_id: str) -> None:
        settings = get_settings()
        self._send_or_fail(
            "Failed to send verification email",
            email_to,
            "GreenPoll - Verify Account",
            "verify",
            {"username": username, "verify_id": verify_id, "url": settings.FRONTEND_URL},
        )

    def send_password_reset_email(self, email_to: str, reset_id: str) -> None:
        settings = get_settings()
        self._send_or_fail(
            "Failed to send password reset email",
            email_to,
            "GreenPoll - Password Reset",
            "password_reset",
            {"reset_id": reset_id, "url": settings.FRONTEND_URL},
        )


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """Get singleton mailer instance."""
    global _mailer
    if _mailer is None:
        _mailer = Mailer()
    return _mailer
