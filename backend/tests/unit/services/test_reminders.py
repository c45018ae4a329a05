"""
Unit Tests for reminder dispatch
"""
from datetime import datetime, timedelta

import pytest

from seminar.core.exceptions import EmailDisabledError
from seminar.models import Branch, Registration, RegistrationStatus, WorkshopAttendance, YearOfStudy
from seminar.services.control_plane import ControlPlane
from seminar.services.email_service import NotificationResult
from seminar.services.reminders import ReminderService, SEMINAR_CONCLUDED_MESSAGE, seminar_starts_at


class ReminderNotifier:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []

    async def send_reminder_email(self, registration, seminar):
        if registration.email in self.failing:
            return NotificationResult.failed("bounced")
        self.sent.append(registration.email)
        return NotificationResult.ok()


def add_registration(db, email, minutes_ago, **overrides):
    fields = dict(
        full_name="Test Student",
        email=email,
        phone="9876543210",
        branch=Branch.CYBERSECURITY,
        year_of_study=YearOfStudy.THIRD,
        workshop_attendance=WorkshopAttendance.YES,
        consent=True,
        registration_date=datetime.utcnow() - timedelta(minutes=minutes_ago),
    )
    fields.update(overrides)
    db.add(Registration(**fields))


async def schedule_seminar(db, start: datetime):
    seminar = await ControlPlane(db).get_seminar_settings()
    seminar.date = start.strftime("%Y-%m-%d")
    seminar.time = start.strftime("%I:%M %p")
    await db.commit()


@pytest.mark.asyncio
async def test_sends_to_pending_in_registration_order(db_session):
    await schedule_seminar(db_session, datetime.now() + timedelta(days=2))
    add_registration(db_session, "late@example.com", 5)
    add_registration(db_session, "early@example.com", 50)
    add_registration(db_session, "bounce@example.com", 20)
    add_registration(db_session, "done@example.com", 40, email_sent=True)
    add_registration(db_session, "gone@example.com", 30, status=RegistrationStatus.REMOVED)
    await db_session.commit()
    notifier = ReminderNotifier(failing={"bounce@example.com"})

    outcome = await ReminderService(db_session, notifier).send_reminders()

    assert notifier.sent == ["early@example.com", "late@example.com"]
    assert outcome.to_dict() == {
        "total": 3,
        "sent": 2,
        "failed": 1,
        "message": "Reminders sent: 2 successful, 1 failed",
    }

    second = await ReminderService(db_session, ReminderNotifier()).send_reminders()
    assert second.total == 1


@pytest.mark.asyncio
async def test_skips_after_seminar_started(db_session):
    await schedule_seminar(db_session, datetime.now() - timedelta(hours=1))
    add_registration(db_session, "someone@example.com", 10)
    await db_session.commit()
    notifier = ReminderNotifier()

    outcome = await ReminderService(db_session, notifier).send_reminders()

    assert outcome.message == SEMINAR_CONCLUDED_MESSAGE
    assert outcome.total == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_refuses_when_email_disabled(db_session):
    await ControlPlane(db_session).set_email_control(False)

    with pytest.raises(EmailDisabledError):
        await ReminderService(db_session, ReminderNotifier()).send_reminders()


@pytest.mark.parametrize("time_value, hour, minute", [
    ("10:30 AM", 10, 30),
    ("2 PM", 14, 0),
    ("18:45", 18, 45),
    ("after lunch", 0, 0),
])
def test_seminar_starts_at(time_value, hour, minute):
    class Seminar:
        date = "2030-01-15"
        time = time_value

    starts = seminar_starts_at(Seminar)

    assert (starts.year, starts.month, starts.day) == (2030, 1, 15)
    assert (starts.hour, starts.minute) == (hour, minute)


def test_seminar_starts_at_unparseable_date():
    class Seminar:
        date = "someday"
        time = "10:00 AM"

    assert seminar_starts_at(Seminar) is None
