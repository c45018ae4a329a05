"""
Statistics Aggregator

Point-in-time counts derived from the registrations table. Nothing here is
stored; every call re-queries so results always match the current rows.
"""
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.models.registration import Registration, RegistrationStatus, WorkshopAttendance


def local_day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    [start, end) of the current local calendar day, as naive UTC datetimes
    comparable with ``Registration.registration_date``.
    """
    local_now = (now or datetime.now(timezone.utc)).astimezone()
    start_local = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    end_local = start_local + timedelta(days=1)
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def to_local_date(utc_value: datetime) -> str:
    """ISO date (YYYY-MM-DD) of a naive UTC timestamp in local time"""
    return utc_value.replace(tzinfo=timezone.utc).astimezone().date().isoformat()


class StatisticsAggregator:
    """Derived registration counts used by admission and reporting"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _active():
        return Registration.status == RegistrationStatus.ACTIVE

    async def total_active(self) -> int:
        total = await self.db.scalar(
            select(func.count(Registration.id)).where(self._active())
        )
        return total or 0

    async def by_workshop_choice(self) -> Dict[str, int]:
        result = await self.db.execute(
            select(Registration.workshop_attendance, func.count(Registration.id))
            .where(self._active())
            .group_by(Registration.workshop_attendance)
        )
        counts = {choice.value: 0 for choice in WorkshopAttendance}
        for choice, count in result.all():
            counts[WorkshopAttendance(choice).value] = count
        return counts

    async def by_branch(self) -> List[Dict[str, Any]]:
        """Branch counts, most popular first"""
        count_col = func.count(Registration.id).label("count")
        result = await self.db.execute(
            select(Registration.branch, count_col)
            .where(self._active())
            .group_by(Registration.branch)
            .order_by(count_col.desc(), Registration.branch.asc())
        )
        return [{"branch": branch.value, "count": count} for branch, count in result.all()]

    async def by_year(self) -> List[Dict[str, Any]]:
        """Year-of-study counts, 1st Year first"""
        result = await self.db.execute(
            select(Registration.year_of_study, func.count(Registration.id))
            .where(self._active())
            .group_by(Registration.year_of_study)
            .order_by(Registration.year_of_study.asc())
        )
        return [{"yearOfStudy": year.value, "count": count} for year, count in result.all()]

    async def today_count(self, now: Optional[datetime] = None) -> int:
        start, end = local_day_bounds(now)
        total = await self.db.scalar(
            select(func.count(Registration.id)).where(
                self._active(),
                Registration.registration_date >= start,
                Registration.registration_date < end,
            )
        )
        return total or 0

    async def recent_daily(self, days: int = 7, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Per-day counts for the last ``days`` local calendar days (today
        included), newest day first.

        Days are bucketed in local time, so grouping happens here rather
        than in SQL (the database only knows UTC).
        """
        local_now = (now or datetime.now(timezone.utc)).astimezone()
        first_day = local_now.date() - timedelta(days=days - 1)
        since = (
            datetime.combine(first_day, datetime.min.time())
            .astimezone()
            .astimezone(timezone.utc)
            .replace(tzinfo=None)
        )
        result = await self.db.execute(
            select(Registration.registration_date).where(
                self._active(),
                Registration.registration_date >= since,
            )
        )
        buckets = Counter(to_local_date(value) for value in result.scalars().all())
        return [
            {"date": day, "count": buckets[day]}
            for day in sorted(buckets, reverse=True)
        ]

    async def emails_sent(self) -> int:
        total = await self.db.scalar(
            select(func.count(Registration.id)).where(
                self._active(),
                Registration.email_sent.is_(True),
            )
        )
        return total or 0

    async def summary(self) -> Dict[str, int]:
        workshop = await self.by_workshop_choice()
        return {
            "totalRegistrations": await self.total_active(),
            "workshopYes": workshop[WorkshopAttendance.YES.value],
            "workshopNo": workshop[WorkshopAttendance.NO.value],
            "todayRegistrations": await self.today_count(),
            "emailsSent": await self.emails_sent(),
        }

    async def full_report(self) -> Dict[str, Any]:
        return {
            "basic": await self.summary(),
            "branch": await self.by_branch(),
            "year": await self.by_year(),
            "recent": await self.recent_daily(),
            "generatedAt": datetime.utcnow().isoformat() + "Z",
        }
