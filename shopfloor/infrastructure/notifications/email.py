"""SMTP notifier for remanufacture requests and unresolved scans."""

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import emails  # type: ignore
from jinja2 import Template, TemplateError

from shopfloor.core.config import Settings, settings
from shopfloor.core.observability import record_notification
from shopfloor.domain.terminal.ports import (
    JobNotFoundNotice,
    NotificationResult,
    RemanufactureNotice,
)

logger = logging.getLogger(__name__)


@dataclass
class EmailData:
    """Email data container with HTML content and subject."""

    html_content: str
    subject: str


def render_email_template(*, template_name: str, context: dict[str, Any]) -> str:
    """
    Render email template with given context.

    Raises:
        FileNotFoundError: If template file doesn't exist
    """
    template_str = (Path(__file__).parent / "email-templates" / template_name).read_text()
    return Template(template_str).render(context)


def generate_message_id() -> str:
    return f"rmf_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def generate_remanufacture_email(notice: RemanufactureNotice) -> EmailData:
    subject = f"Remanufacture Request #{notice.reject_id} - {notice.part_number}"
    html_content = render_email_template(
        template_name="remanufacture_request.html",
        context={"project_name": settings.PROJECT_NAME, **notice.model_dump()},
    )
    return EmailData(html_content=html_content, subject=subject)


def generate_job_not_found_email(notice: JobNotFoundNotice) -> EmailData:
    subject = f"Job Not Found - {notice.scan} / {notice.operation_code}"
    html_content = render_email_template(
        template_name="job_not_found.html",
        context={"project_name": settings.PROJECT_NAME, **notice.model_dump()},
    )
    return EmailData(html_content=html_content, subject=subject)


class EmailNotifier:
    """
    Notifier sending HTML email over SMTP.

    Sending is best-effort: failures are logged and reported in the
    NotificationResult, never raised.
    """

    def __init__(self, config: Settings | None = None):
        self._settings = config or settings

    def _send(
        self,
        *,
        kind: str,
        recipients: list[str],
        render: Callable[[], EmailData],
        headers: dict[str, str] | None = None,
    ) -> NotificationResult:
        if not self._settings.emails_enabled:
            record_notification(kind, "disabled")
            logger.warning("Email not configured, skipping %s notification", kind)
            return NotificationResult(success=False, error="Email is not configured")
        if not recipients:
            record_notification(kind, "disabled")
            logger.warning("No recipients configured for %s notification", kind)
            return NotificationResult(success=False, error="No recipients configured")

        try:
            email = render()
        except (OSError, TemplateError) as e:
            record_notification(kind, "failed")
            logger.error("Failed to render %s email: %s", kind, e)
            return NotificationResult(success=False, error=f"Email rendering failed: {e}")

        message = emails.Message(
            subject=email.subject,
            html=email.html_content,
            mail_from=(self._settings.EMAILS_FROM_NAME, self._settings.EMAILS_FROM_EMAIL),
            headers=headers or {},
        )
        smtp_options: dict[str, Any] = {
            "host": self._settings.SMTP_HOST,
            "port": self._settings.SMTP_PORT,
        }
        if self._settings.SMTP_TLS:
            smtp_options["tls"] = True
        elif self._settings.SMTP_SSL:
            smtp_options["ssl"] = True
        if self._settings.SMTP_USER:
            smtp_options["user"] = self._settings.SMTP_USER
        if self._settings.SMTP_PASSWORD:
            smtp_options["password"] = self._settings.SMTP_PASSWORD

        try:
            response = message.send(to=recipients, smtp=smtp_options)
        except Exception as e:  # SMTP and socket errors vary by transport
            record_notification(kind, "failed")
            logger.error("Failed to send %s email: %s", kind, e)
            return NotificationResult(success=False, error=str(e))

        logger.info("send email result: %s", response)
        if response is None or response.status_code != 250:
            record_notification(kind, "failed")
            error = getattr(response, "error", None) or "SMTP server rejected message"
            return NotificationResult(success=False, error=str(error))

        record_notification(kind, "sent")
        return NotificationResult(success=True)

    def send_remanufacture_email(self, notice: RemanufactureNotice) -> NotificationResult:
        message_id = generate_message_id()
        result = self._send(
            kind="remanufacture",
            recipients=list(self._settings.REMANUFACTURE_EMAIL_TO),
            render=lambda: generate_remanufacture_email(notice),
            headers={"X-Remanufacture-Request": message_id},
        )
        if result.success:
            return NotificationResult(success=True, message_id=message_id)
        return result

    def send_job_not_found_email(self, notice: JobNotFoundNotice) -> NotificationResult:
        return self._send(
            kind="job_not_found",
            recipients=list(self._settings.JOB_NOT_FOUND_EMAIL_TO),
            render=lambda: generate_job_not_found_email(notice),
        )
