"""
Admin reporting: statistics, CSV export, reminder emails.
"""
import csv
import io
from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.database import get_db
from seminar.core.logging_config import logger
from seminar.models import AdminUser
from seminar.modules.auth.dependencies import get_current_admin
from seminar.schemas.admin import ReminderReport
from seminar.services.email_service import EmailService, get_email_service
from seminar.services.registration_admin import CSV_HEADERS, RegistrationAdmin, csv_row
from seminar.services.reminders import ReminderService
from seminar.services.statistics import StatisticsAggregator

router = APIRouter()


@router.get("/statistics")
async def statistics(
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    return {"success": True, "data": await StatisticsAggregator(db).full_report()}


@router.get("/export/csv")
async def export_csv(
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """Active registrations as a CSV attachment"""
    rows = await RegistrationAdmin(db).export_rows()

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for registration in rows:
        writer.writerow(csv_row(registration))
    buffer.seek(0)

    logger.info(f"[Export] {len(rows)} registrations exported by {current_admin.username}")
    filename = f"registrations-{date.today().isoformat()}.csv"
    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/send-reminders")
async def send_reminders(
    db: AsyncSession = Depends(get_db),
    notifier: EmailService = Depends(get_email_service),
    current_admin: AdminUser = Depends(get_current_admin)
):
    outcome = await ReminderService(db, notifier).send_reminders()
    report = ReminderReport(**outcome.to_dict())
    return {"success": True, "message": report.message, "data": report.model_dump()}
