"""
Reminder dispatch for registrants who never received a confirmation email.
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.config import settings
from seminar.core.exceptions import EmailDisabledError
from seminar.core.logging_config import logger
from seminar.models import Registration, RegistrationStatus, SeminarSettings
from seminar.services.control_plane import ControlPlane
from seminar.services.email_service import EmailService

SEMINAR_CONCLUDED_MESSAGE = "Seminar has already concluded"

_TIME_FORMATS = ("%I:%M %p", "%I %p", "%H:%M")


def seminar_starts_at(seminar: SeminarSettings) -> Optional[datetime]:
    """Local start time of the seminar, or None if date/time cannot be parsed"""
    try:
        day = datetime.strptime(seminar.date, "%Y-%m-%d")
    except (TypeError, ValueError):
        return None

    raw_time = (seminar.time or "").strip().upper()
    for fmt in _TIME_FORMATS:
        try:
            clock = datetime.strptime(raw_time, fmt)
        except ValueError:
            continue
        return day.replace(hour=clock.hour, minute=clock.minute)
    return day


@dataclass
class ReminderOutcome:
    total: int
    sent: int
    failed: int
    message: str

    def to_dict(self):
        return {"total": self.total, "sent": self.sent, "failed": self.failed, "message": self.message}


class ReminderService:
    """Sends reminder emails one at a time with a short pause between them"""

    def __init__(self, db: AsyncSession, notifier: EmailService, control_plane: Optional[ControlPlane] = None):
        self.db = db
        self.notifier = notifier
        self.control_plane = control_plane or ControlPlane(db)

    async def send_reminders(self, now: Optional[datetime] = None) -> ReminderOutcome:
        email_control = await self.control_plane.get_email_control()
        if not email_control.enabled:
            raise EmailDisabledError()

        seminar = await self.control_plane.get_seminar_settings()
        starts_at = seminar_starts_at(seminar)
        if starts_at is not None and starts_at < (now or datetime.now()):
            logger.info(f"[Reminders] Skipped: seminar started at {starts_at.isoformat()}")
            return ReminderOutcome(0, 0, 0, SEMINAR_CONCLUDED_MESSAGE)

        result = await self.db.execute(
            select(Registration)
            .where(
                Registration.status == RegistrationStatus.ACTIVE,
                Registration.email_sent.is_(False),
            )
            .order_by(Registration.registration_date.asc())
        )
        pending = result.scalars().all()

        sent = failed = 0
        for index, registration in enumerate(pending):
            if index:
                await asyncio.sleep(settings.REMINDER_SEND_DELAY_SECONDS)

            outcome = await self.notifier.send_reminder_email(registration, seminar)
            logger.log_notification_event("reminder", registration.email, outcome.sent, outcome.error)
            if outcome.sent:
                registration.email_sent = True
                registration.email_sent_date = datetime.utcnow()
                await self.db.commit()
                sent += 1
            else:
                failed += 1

        message = f"Reminders sent: {sent} successful, {failed} failed"
        logger.info(f"[Reminders] {message} (of {len(pending)})")
        return ReminderOutcome(len(pending), sent, failed, message)
