from sqlalchemy import Column, String, Boolean, DateTime, Integer
from datetime import datetime

from seminar.core.database import Base
from seminar.core.types import GUID
from seminar.models.seminar_settings import SINGLETON_ID

DEFAULT_MAINTENANCE_MESSAGE = "Registration is temporarily closed."


class RegistrationControl(Base):
    """Kill switch for new registrations (singleton)"""
    __tablename__ = "registration_controls"

    id = Column(Integer, primary_key=True, default=SINGLETON_ID, autoincrement=False)
    enabled = Column(Boolean, nullable=False, default=True)
    maintenance_message = Column(String(500), nullable=False, default=DEFAULT_MAINTENANCE_MESSAGE)

    updated_by = Column(GUID, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<RegistrationControl enabled={self.enabled}>"
