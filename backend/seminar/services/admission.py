"""
Admission Controller

Decides whether a registration attempt is accepted, in this order:

    maintenance -> capacity -> validation -> bot verification
    -> duplicate email -> persist (seat reservation + insert) -> notify

Each rejection raises a typed ``SeminarError``. The capacity and duplicate
pre-checks only exist to fail fast. Correctness comes from the write
itself: a conditional UPDATE reserves a seat only while
``seats_taken < max_participants``, and a partial unique index rejects a
second active row for the same email. Both happen in the same transaction
as the INSERT, so a lost race rolls everything back.
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.config import settings
from seminar.core.exceptions import (
    CapacityExceededError,
    DuplicateEmailError,
    MaintenanceClosedError,
    PersistenceError,
    RegistrationValidationError,
    VerificationFailedError,
)
from seminar.core.logging_config import logger
from seminar.models import Registration, RegistrationStatus, SeminarSettings, SINGLETON_ID
from seminar.schemas.registration import (
    RegistrationAccepted,
    RegistrationCreate,
    RegistrationPublic,
    REGISTRATION_FIELD_MESSAGES,
)
from seminar.schemas.validation import collect_field_errors
from seminar.services.bot_verification import RecaptchaVerifier
from seminar.services.control_plane import ControlPlane
from seminar.services.email_service import EmailService, NotificationResult
from seminar.services.statistics import StatisticsAggregator

EMAIL_SENT_MESSAGE = "Registration successful! Please check your email for seminar details."
EMAIL_PENDING_MESSAGE = (
    "Registration successful! Email services are under process, "
    "but your registration has been accepted."
)


async def find_active_registration(db: AsyncSession, email: str) -> Optional[Registration]:
    result = await db.execute(
        select(Registration).where(
            Registration.email == email,
            Registration.status == RegistrationStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


@dataclass
class AdmissionResult:
    registration: RegistrationPublic
    notification: NotificationResult

    @property
    def email_sent(self) -> bool:
        return self.notification.sent

    @property
    def message(self) -> str:
        return EMAIL_SENT_MESSAGE if self.email_sent else EMAIL_PENDING_MESSAGE

    def to_response(self) -> Dict[str, Any]:
        data = RegistrationAccepted(
            **self.registration.model_dump(),
            email_sent=self.email_sent,
        )
        return {
            "success": True,
            "message": self.message,
            "data": data.model_dump(by_alias=True, mode="json"),
        }


class AdmissionController:
    """Accepts or rejects registration attempts"""

    def __init__(
        self,
        db: AsyncSession,
        verifier: RecaptchaVerifier,
        notifier: EmailService,
        control_plane: Optional[ControlPlane] = None,
        statistics: Optional[StatisticsAggregator] = None,
    ):
        self.db = db
        self.verifier = verifier
        self.notifier = notifier
        self.control_plane = control_plane or ControlPlane(db)
        self.statistics = statistics or StatisticsAggregator(db)

    async def submit_registration(
        self,
        payload: Mapping[str, Any],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AdmissionResult:
        # 1. Maintenance switch
        control = await self.control_plane.get_registration_control()
        if not control.enabled:
            logger.log_admission_event("rejected", reason="registration closed")
            raise MaintenanceClosedError(control.maintenance_message)

        # 2. Capacity pre-check
        seminar = await self.control_plane.get_seminar_settings()
        max_participants = seminar.max_participants
        whatsapp_number = seminar.whatsapp_number
        current = await self.statistics.total_active()
        if current >= max_participants:
            logger.log_admission_event("rejected", reason=f"full ({current}/{max_participants})")
            raise CapacityExceededError(max_participants, current, whatsapp_number)

        # 3. Field validation
        data = self.validate(payload)

        # 4. Bot verification
        verification = await self.verifier.verify(data.verification_token, ip_address)
        if not verification.success:
            logger.log_admission_event("rejected", data.email, reason=f"verification: {verification.reason}")
            raise VerificationFailedError(verification.reason or "verification rejected")

        # 5. Duplicate pre-check
        if await find_active_registration(self.db, data.email) is not None:
            logger.log_admission_event("rejected", data.email, reason="duplicate email")
            raise DuplicateEmailError(data.email)

        # 6. Persist
        registration = await self._persist(data, ip_address, user_agent, max_participants, whatsapp_number)
        public = RegistrationPublic.model_validate(registration)
        logger.log_admission_event("accepted", data.email, registration_id=public.id)

        # 7. Notify
        notification = await self._notify(registration)
        return AdmissionResult(registration=public, notification=notification)

    @staticmethod
    def validate(payload: Mapping[str, Any]) -> RegistrationCreate:
        """Run every field rule; report all failing fields at once"""
        try:
            return RegistrationCreate.model_validate(dict(payload or {}))
        except ValidationError as e:
            errors = collect_field_errors(e, REGISTRATION_FIELD_MESSAGES)
            logger.log_admission_event(
                "rejected", reason=f"validation ({', '.join(err['field'] for err in errors)})"
            )
            raise RegistrationValidationError(errors)

    async def _reserve_seat(self) -> bool:
        """Atomically take one seat if any are left"""
        result = await self.db.execute(
            update(SeminarSettings)
            .where(
                SeminarSettings.id == SINGLETON_ID,
                SeminarSettings.seats_taken < SeminarSettings.max_participants,
            )
            .values(seats_taken=SeminarSettings.seats_taken + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def _persist(
        self,
        data: RegistrationCreate,
        ip_address: Optional[str],
        user_agent: Optional[str],
        max_participants: int,
        whatsapp_number: Optional[str],
    ) -> Registration:
        registration = Registration(
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            branch=data.branch,
            year_of_study=data.year_of_study,
            workshop_attendance=data.workshop_attendance,
            github_username=data.github_username,
            consent=data.consent,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
            status=RegistrationStatus.ACTIVE,
            email_sent=False,
            registration_date=datetime.utcnow(),
        )

        try:
            if not await self._reserve_seat():
                await self.db.rollback()
                current = await self.statistics.total_active()
                logger.log_admission_event("rejected", data.email, reason="no seat left at insert")
                raise CapacityExceededError(max_participants, current, whatsapp_number)

            self.db.add(registration)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.log_admission_event("rejected", data.email, reason="duplicate email (unique index)")
            raise DuplicateEmailError(data.email)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.log_error_with_context(e, "registration persist", registrant_email=data.email)
            raise PersistenceError()

        return registration

    async def _notify(self, registration: Registration) -> NotificationResult:
        """
        Single best-effort welcome email. Any failure becomes a failed
        NotificationResult; the registration is already committed.
        """
        try:
            email_control = await self.control_plane.get_email_control()
            if not email_control.enabled:
                result = NotificationResult.failed("email disabled")
            else:
                seminar = await self.control_plane.get_seminar_settings()
                result = await asyncio.wait_for(
                    self.notifier.send_welcome_email(registration, seminar),
                    timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
                )
        except asyncio.TimeoutError:
            result = NotificationResult.failed("timed out")
        except Exception as e:
            result = NotificationResult.failed(f"{type(e).__name__}: {e}")

        logger.log_notification_event("welcome", registration.email, result.sent, result.error)

        if result.sent:
            registration.email_sent = True
            registration.email_sent_date = datetime.utcnow()
            try:
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.log_error_with_context(e, "mark email sent", registration_id=registration.id)

        return result
