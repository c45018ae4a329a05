"""
Unit Tests for StatisticsAggregator
"""
from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from seminar.models import (
    Branch,
    Registration,
    RegistrationStatus,
    WorkshopAttendance,
    YearOfStudy,
)
from seminar.services.statistics import StatisticsAggregator, local_day_bounds


def make_registration(email, **overrides):
    fields = dict(
        full_name="Test Student",
        email=email,
        phone="9876543210",
        branch=Branch.IT,
        year_of_study=YearOfStudy.FIRST,
        workshop_attendance=WorkshopAttendance.YES,
        consent=True,
        status=RegistrationStatus.ACTIVE,
        registration_date=datetime.utcnow(),
    )
    fields.update(overrides)
    return Registration(**fields)


@pytest_asyncio.fixture
async def seeded(db_session):
    db_session.add_all([
        make_registration("a@example.com", branch=Branch.DATA_SCIENCE, email_sent=True),
        make_registration("b@example.com", branch=Branch.DATA_SCIENCE, year_of_study=YearOfStudy.FOURTH),
        make_registration("c@example.com", workshop_attendance=WorkshopAttendance.NO,
                          registration_date=datetime.utcnow() - timedelta(days=3)),
        make_registration("d@example.com", status=RegistrationStatus.REMOVED),
    ])
    await db_session.commit()
    return StatisticsAggregator(db_session)


@pytest.mark.asyncio
async def test_counts_only_active(seeded):
    assert await seeded.total_active() == 3
    assert await seeded.by_workshop_choice() == {"Yes": 2, "No": 1}
    assert await seeded.emails_sent() == 1


@pytest.mark.asyncio
async def test_branch_most_popular_first(seeded):
    assert await seeded.by_branch() == [
        {"branch": "Data Science", "count": 2},
        {"branch": "IT", "count": 1},
    ]


@pytest.mark.asyncio
async def test_year_ordered(seeded):
    assert await seeded.by_year() == [
        {"yearOfStudy": "1st Year", "count": 2},
        {"yearOfStudy": "4th Year", "count": 1},
    ]


@pytest.mark.asyncio
async def test_today_and_recent(seeded):
    assert await seeded.today_count() == 2

    recent = await seeded.recent_daily()
    assert sum(day["count"] for day in recent) == 3
    assert recent == sorted(recent, key=lambda day: day["date"], reverse=True)


@pytest.mark.asyncio
async def test_empty_table(db_session):
    stats = StatisticsAggregator(db_session)

    assert await stats.summary() == {
        "totalRegistrations": 0,
        "workshopYes": 0,
        "workshopNo": 0,
        "todayRegistrations": 0,
        "emailsSent": 0,
    }
    assert await stats.by_branch() == []


def test_local_day_bounds_span_one_day():
    start, end = local_day_bounds()

    assert end - start == timedelta(days=1)
    assert start <= datetime.utcnow() < end


@pytest.mark.asyncio
async def test_recent_window_is_whole_local_days(db_session):
    now = datetime.utcnow()
    db_session.add_all([
        make_registration("today@example.com", registration_date=now),
        make_registration("six@example.com", registration_date=now - timedelta(days=6)),
        make_registration("seven@example.com", registration_date=now - timedelta(days=7)),
    ])
    await db_session.commit()

    recent = await StatisticsAggregator(db_session).recent_daily(days=7)

    assert len(recent) == 2
    assert sum(day["count"] for day in recent) == 2
