"""
Email Service for Seminar Registration
======================================
Sends the welcome email after a registration and the pre-seminar
reminders. Delivery is SMTP via aiosmtplib.

Every public ``send_*`` method returns a ``NotificationResult`` instead of
raising, so callers can log the outcome and move on.
"""

import aiosmtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from datetime import datetime
from html import escape
from typing import Optional

from seminar.core.config import settings
from seminar.core.logging_config import logger


@dataclass
class NotificationResult:
    """Outcome of a single best-effort email attempt"""
    sent: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "NotificationResult":
        return cls(sent=True)

    @classmethod
    def failed(cls, error: str) -> "NotificationResult":
        return cls(sent=False, error=error)


def format_seminar_date(date_str: Optional[str]) -> str:
    """'2025-07-25' -> 'Friday, July 25, 2025' (unparseable input returned as-is)"""
    if not date_str:
        return "To be announced"
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").strftime("%A, %B %d, %Y").replace(" 0", " ")
    except ValueError:
        return date_str


def _seminar_details_html(seminar) -> str:
    rows = [
        ("Date", format_seminar_date(seminar.date)),
        ("Time", seminar.time),
        ("Duration", seminar.duration),
        ("Location", seminar.location),
        ("Instructor", seminar.instructor_name),
    ]
    items = "".join(
        f"<li><strong>{label}:</strong> {escape(str(value))}</li>"
        for label, value in rows if value
    )
    return f"<ul>{items}</ul>"


class EmailService:
    """Async SMTP email service"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> NotificationResult:
        """Send one email. Never raises."""
        if not self.is_configured:
            logger.warning("[Email] SMTP credentials not configured, skipping email send")
            return NotificationResult.failed("email service not configured")

        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        message["Subject"] = subject
        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=self.use_tls,
                timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return NotificationResult.failed(str(e))

        logger.info(f"[Email/SMTP] Successfully sent email to {to_email}: {subject}")
        return NotificationResult.ok()

    async def send_welcome_email(self, registration, seminar) -> NotificationResult:
        """Confirmation sent right after a registration is accepted"""
        name = escape(registration.full_name)
        group_link = ""
        if seminar.whatsapp_group_link:
            group_link = (
                f'<p>Join the seminar WhatsApp group: '
                f'<a href="{escape(seminar.whatsapp_group_link)}">{escape(seminar.whatsapp_group_link)}</a></p>'
            )
        html = (
            f"<h2>Welcome, {name}!</h2>"
            f"<p>You are registered for <strong>{escape(seminar.title)}</strong>.</p>"
            f"{_seminar_details_html(seminar)}"
            f"{group_link}"
            f"<p>See you there!</p>"
        )
        text = (
            f"Hi {registration.full_name},\n\n"
            f"You are registered for {seminar.title}.\n"
            f"Date: {format_seminar_date(seminar.date)} at {seminar.time}\n"
            f"Location: {seminar.location}\n"
        )
        return await self.send_email(
            registration.email,
            f"Registration Confirmed: {seminar.title}",
            html,
            text,
        )

    async def send_reminder_email(self, registration, seminar) -> NotificationResult:
        """Reminder for registrants who have not yet received a confirmation"""
        html = (
            f"<h2>Reminder: {escape(seminar.title)}</h2>"
            f"<p>Hi {escape(registration.full_name)}, this is a reminder about the upcoming seminar.</p>"
            f"{_seminar_details_html(seminar)}"
        )
        text = (
            f"Hi {registration.full_name},\n\n"
            f"Reminder: {seminar.title} on {format_seminar_date(seminar.date)} at {seminar.time}, "
            f"{seminar.location}.\n"
        )
        return await self.send_email(
            registration.email,
            f"Reminder: {seminar.title}",
            html,
            text,
        )


email_service = EmailService()


def get_email_service() -> EmailService:
    """FastAPI dependency; overridden in tests"""
    return email_service
