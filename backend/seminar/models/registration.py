"""
Registration Model - one row per accepted seminar registration
"""

from sqlalchemy import Column, String, Boolean, DateTime, Index, Enum as SQLEnum, text
from datetime import datetime
import enum

from seminar.core.database import Base
from seminar.core.types import GUID, NormalizedEmail, generate_uuid


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Branch(str, enum.Enum):
    IT = "IT"
    COMPUTER_SCIENCE = "Computer Science"
    CYBERSECURITY = "Cybersecurity"
    DATA_SCIENCE = "Data Science"
    OTHER = "Other"


class YearOfStudy(str, enum.Enum):
    FIRST = "1st Year"
    SECOND = "2nd Year"
    THIRD = "3rd Year"
    FOURTH = "4th Year"


class WorkshopAttendance(str, enum.Enum):
    YES = "Yes"
    NO = "No"


class RegistrationStatus(str, enum.Enum):
    """Soft lifecycle marker; removed rows no longer count toward capacity"""
    ACTIVE = "active"
    REMOVED = "removed"


class Registration(Base):
    """Seminar registration submitted through the public form"""
    __tablename__ = "registrations"
    __table_args__ = (
        # Email is unique among active registrations only
        Index(
            "uq_registrations_active_email",
            "email",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("ix_registrations_status_date", "status", "registration_date"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)

    # Personal Information
    full_name = Column(String(100), nullable=False)
    email = Column(NormalizedEmail, nullable=False)
    phone = Column(String(10), nullable=False)

    # Academic Information
    branch = Column(SQLEnum(Branch, name="branch", values_callable=_enum_values), nullable=False)
    year_of_study = Column(
        SQLEnum(YearOfStudy, name="year_of_study", values_callable=_enum_values), nullable=False
    )
    workshop_attendance = Column(
        SQLEnum(WorkshopAttendance, name="workshop_attendance", values_callable=_enum_values),
        nullable=False,
    )
    github_username = Column(String(39), nullable=True)
    consent = Column(Boolean, nullable=False, default=False)

    # Request metadata
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)

    # Lifecycle
    status = Column(
        SQLEnum(RegistrationStatus, name="registration_status", values_callable=_enum_values),
        nullable=False,
        default=RegistrationStatus.ACTIVE,
    )
    email_sent = Column(Boolean, nullable=False, default=False)
    email_sent_date = Column(DateTime, nullable=True)

    # Timestamps
    registration_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Registration {self.full_name} - {self.email}>"
