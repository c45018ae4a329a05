"""
Admin-side registration management: paging, edits, soft delete, export.
"""
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.exceptions import ConflictError, RegistrationNotFoundError, RegistrationValidationError
from seminar.core.logging_config import logger
from seminar.models import Registration, RegistrationStatus
from seminar.schemas.registration import RegistrationUpdate, REGISTRATION_FIELD_MESSAGES
from seminar.schemas.validation import collect_field_errors
from seminar.services.control_plane import ControlPlane

SORT_COLUMNS = {
    "registrationDate": Registration.registration_date,
    "fullName": Registration.full_name,
    "email": Registration.email,
    "branch": Registration.branch,
    "yearOfStudy": Registration.year_of_study,
}

EMAIL_TAKEN_MESSAGE = "Email is already registered to another participant"


def pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


class RegistrationAdmin:
    """Registration CRUD for the dashboard"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_page(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        sort_by: str = "registrationDate",
        sort_order: str = "desc",
        status: RegistrationStatus = RegistrationStatus.ACTIVE,
    ) -> Dict[str, Any]:
        query = select(Registration).where(Registration.status == status)

        if search and search.strip():
            term = f"%{search.strip()}%"
            query = query.where(or_(
                Registration.full_name.ilike(term),
                cast(Registration.email, String).ilike(term),
                Registration.phone.ilike(term),
                cast(Registration.branch, String).ilike(term),
            ))

        total = await self.db.scalar(select(func.count()).select_from(query.subquery())) or 0

        sort_column = SORT_COLUMNS.get(sort_by, Registration.registration_date)
        ordering = sort_column.asc() if sort_order == "asc" else sort_column.desc()
        query = query.order_by(ordering, Registration.id.asc())
        query = query.offset((page - 1) * limit).limit(limit)

        result = await self.db.execute(query)
        return {
            "registrations": result.scalars().all(),
            "pagination": pagination(page, limit, total),
        }

    async def get(self, registration_id: str) -> Registration:
        registration = await self.db.get(Registration, registration_id)
        if registration is None:
            raise RegistrationNotFoundError(registration_id)
        return registration

    async def update(self, registration_id: str, payload: Mapping[str, Any], actor: Optional[str] = None) -> Registration:
        try:
            fields = RegistrationUpdate.model_validate(dict(payload or {}))
        except ValidationError as e:
            raise RegistrationValidationError(collect_field_errors(e, REGISTRATION_FIELD_MESSAGES))

        registration = await self.get(registration_id)

        if registration.status == RegistrationStatus.ACTIVE and fields.email != registration.email:
            clash = await self.db.scalar(
                select(Registration.id).where(
                    Registration.email == fields.email,
                    Registration.status == RegistrationStatus.ACTIVE,
                    Registration.id != registration.id,
                )
            )
            if clash is not None:
                raise ConflictError(EMAIL_TAKEN_MESSAGE, field="email")

        for key, value in fields.model_dump().items():
            setattr(registration, key, value)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(EMAIL_TAKEN_MESSAGE, field="email")

        logger.info(
            f"[Registrations] Updated {registration_id}",
            extra={"event_type": "registration_update", "registration_id": registration_id, "actor": actor},
        )
        return registration

    async def soft_delete(self, registration_id: str, actor: Optional[str] = None) -> Registration:
        """Mark removed and free its seat. Removing twice is a no-op."""
        registration = await self.get(registration_id)
        if registration.status == RegistrationStatus.REMOVED:
            return registration

        registration.status = RegistrationStatus.REMOVED
        await ControlPlane(self.db).release_seat()
        await self.db.commit()

        logger.info(
            f"[Registrations] Removed {registration_id}",
            extra={"event_type": "registration_removed", "registration_id": registration_id, "actor": actor},
        )
        return registration

    async def export_rows(self) -> Sequence[Registration]:
        """Active registrations, newest first"""
        result = await self.db.execute(
            select(Registration)
            .where(Registration.status == RegistrationStatus.ACTIVE)
            .order_by(Registration.registration_date.desc())
        )
        return result.scalars().all()


CSV_HEADERS: List[str] = [
    "ID", "Full Name", "Email", "Phone", "Branch", "Year of Study",
    "Workshop Attendance", "GitHub Username", "Registration Date",
    "Email Sent", "IP Address",
]


def csv_row(registration: Registration) -> List[str]:
    return [
        registration.id,
        registration.full_name,
        registration.email,
        registration.phone,
        registration.branch.value,
        registration.year_of_study.value,
        registration.workshop_attendance.value,
        registration.github_username or "",
        registration.registration_date.isoformat(),
        "Yes" if registration.email_sent else "No",
        registration.ip_address or "",
    ]
