"""
Administrative Control Plane

Owns the three singleton configuration rows (registration kill switch,
email kill switch, seminar settings). Rows are addressed by the fixed
``SINGLETON_ID`` and created on first access, so there is never any doubt
about which row is authoritative.

Reads always go to the database (``populate_existing``); nothing is cached
in the process, so a toggle takes effect on the very next admission.
"""
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError
from sqlalchemy import select, func, update, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.config import settings
from seminar.core.exceptions import RegistrationValidationError
from seminar.core.logging_config import logger
from seminar.models import (
    EmailControl,
    Registration,
    RegistrationControl,
    RegistrationStatus,
    SeminarSettings,
    SINGLETON_ID,
    DEFAULT_MAINTENANCE_MESSAGE,
)
from seminar.schemas.seminar import SeminarSettingsUpdate, SEMINAR_FIELD_MESSAGES
from seminar.schemas.validation import collect_field_errors
from seminar.services.statistics import StatisticsAggregator

ModelT = TypeVar("ModelT")


def default_seminar_settings() -> Dict[str, Any]:
    """Initial seminar record, taken from configuration"""
    return {
        "title": settings.SEMINAR_TITLE,
        "date": settings.SEMINAR_DATE,
        "time": settings.SEMINAR_TIME,
        "location": settings.SEMINAR_LOCATION,
        "duration": settings.SEMINAR_DURATION,
        "description": settings.SEMINAR_DESCRIPTION,
        "instructor_name": settings.SEMINAR_INSTRUCTOR_NAME,
        "instructor_email": settings.SEMINAR_INSTRUCTOR_EMAIL,
        "max_participants": settings.SEMINAR_MAX_PARTICIPANTS,
        "seats_taken": 0,
        "whatsapp_number": settings.WHATSAPP_NUMBER,
        "whatsapp_group_link": settings.WHATSAPP_GROUP_LINK or None,
        "is_active": True,
    }


class ControlPlane:
    """Read and upsert the singleton configuration records"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_or_create(self, model: Type[ModelT], defaults: Callable[[], Dict[str, Any]]) -> ModelT:
        instance = await self.db.get(model, SINGLETON_ID, populate_existing=True)
        if instance is not None:
            return instance

        instance = model(id=SINGLETON_ID, **defaults())
        self.db.add(instance)
        try:
            await self.db.commit()
        except IntegrityError:
            # Created concurrently by another request; use that row
            await self.db.rollback()
            instance = await self.db.get(model, SINGLETON_ID, populate_existing=True)
        else:
            logger.info(f"[ControlPlane] Created default {model.__tablename__} record")
        return instance

    # ---- Registration kill switch ----

    async def get_registration_control(self) -> RegistrationControl:
        return await self._get_or_create(
            RegistrationControl,
            lambda: {"enabled": True, "maintenance_message": DEFAULT_MAINTENANCE_MESSAGE},
        )

    async def set_registration_control(
        self,
        enabled: bool,
        message: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> RegistrationControl:
        control = await self.get_registration_control()
        control.enabled = enabled
        if message is not None and message.strip():
            control.maintenance_message = message.strip()
        control.updated_by = actor
        control.updated_at = datetime.utcnow()
        await self.db.commit()

        logger.info(
            f"[ControlPlane] Registration {'enabled' if enabled else 'disabled'}",
            extra={"event_type": "control_change", "control": "registration", "enabled": enabled},
        )
        return control

    # ---- Email kill switch ----

    async def get_email_control(self) -> EmailControl:
        return await self._get_or_create(EmailControl, lambda: {"enabled": True})

    async def set_email_control(self, enabled: bool, actor: Optional[str] = None) -> EmailControl:
        control = await self.get_email_control()
        control.enabled = enabled
        control.updated_by = actor
        control.updated_at = datetime.utcnow()
        await self.db.commit()

        logger.info(
            f"[ControlPlane] Email {'enabled' if enabled else 'disabled'}",
            extra={"event_type": "control_change", "control": "email", "enabled": enabled},
        )
        return control

    # ---- Seminar settings ----

    async def get_seminar_settings(self) -> SeminarSettings:
        return await self._get_or_create(SeminarSettings, default_seminar_settings)

    async def set_seminar_settings(
        self,
        fields: Union[SeminarSettingsUpdate, Mapping[str, Any]],
        actor: Optional[str] = None,
    ) -> SeminarSettings:
        if not isinstance(fields, SeminarSettingsUpdate):
            try:
                fields = SeminarSettingsUpdate.model_validate(dict(fields))
            except ValidationError as e:
                raise RegistrationValidationError(collect_field_errors(e, SEMINAR_FIELD_MESSAGES))

        seminar = await self.get_seminar_settings()
        for key, value in fields.model_dump().items():
            setattr(seminar, key, value)
        seminar.updated_by = actor
        seminar.updated_at = datetime.utcnow()
        await self.db.commit()

        logger.info(
            f"[ControlPlane] Seminar settings updated (capacity {seminar.max_participants})",
            extra={"event_type": "control_change", "control": "seminar_settings"},
        )
        return seminar

    async def capacity_snapshot(self) -> Dict[str, Any]:
        seminar = await self.get_seminar_settings()
        current = await StatisticsAggregator(self.db).total_active()
        return {
            "currentRegistrations": current,
            "availableSlots": max(0, seminar.max_participants - current),
            "isRegistrationFull": current >= seminar.max_participants,
        }

    # ---- Seat reservation counter ----

    async def release_seat(self) -> None:
        """Give back one reserved seat (floor 0). Caller commits."""
        await self.db.execute(
            update(SeminarSettings)
            .where(SeminarSettings.id == SINGLETON_ID)
            .values(
                seats_taken=case(
                    (SeminarSettings.seats_taken > 0, SeminarSettings.seats_taken - 1),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )

    async def resync_seats(self) -> int:
        """Reset the reservation counter to the live active count"""
        active = (
            select(func.count(Registration.id))
            .where(Registration.status == RegistrationStatus.ACTIVE)
            .scalar_subquery()
        )
        await self.db.execute(
            update(SeminarSettings)
            .where(SeminarSettings.id == SINGLETON_ID)
            .values(seats_taken=active)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return await StatisticsAggregator(self.db).total_active()
