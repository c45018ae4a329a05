from sqlalchemy import Column, Boolean, DateTime, Integer
from datetime import datetime

from seminar.core.database import Base
from seminar.core.types import GUID
from seminar.models.seminar_settings import SINGLETON_ID


class EmailControl(Base):
    """Kill switch for outgoing email (singleton)"""
    __tablename__ = "email_controls"

    id = Column(Integer, primary_key=True, default=SINGLETON_ID, autoincrement=False)
    enabled = Column(Boolean, nullable=False, default=True)

    updated_by = Column(GUID, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<EmailControl enabled={self.enabled}>"
