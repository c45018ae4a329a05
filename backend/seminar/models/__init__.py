# Re-export all models for convenient imports
from seminar.models.registration import (
    Registration,
    RegistrationStatus,
    Branch,
    YearOfStudy,
    WorkshopAttendance,
)
from seminar.models.seminar_settings import SeminarSettings, SINGLETON_ID
from seminar.models.registration_control import RegistrationControl, DEFAULT_MAINTENANCE_MESSAGE
from seminar.models.email_control import EmailControl
from seminar.models.admin_user import AdminUser, AdminRole

__all__ = [
    # Registration
    "Registration",
    "RegistrationStatus",
    "Branch",
    "YearOfStudy",
    "WorkshopAttendance",
    # Configuration singletons
    "SeminarSettings",
    "RegistrationControl",
    "EmailControl",
    "SINGLETON_ID",
    "DEFAULT_MAINTENANCE_MESSAGE",
    # Admin
    "AdminUser",
    "AdminRole",
]
