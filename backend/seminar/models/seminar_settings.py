"""
Seminar Settings Model - singleton row describing the seminar
"""

from sqlalchemy import Column, String, Boolean, DateTime, Text, Integer
from datetime import datetime

from seminar.core.database import Base
from seminar.core.types import GUID

# Well-known primary key for every singleton configuration table
SINGLETON_ID = 1


class SeminarSettings(Base):
    """Seminar schedule, instructor and capacity"""
    __tablename__ = "seminar_settings"

    id = Column(Integer, primary_key=True, default=SINGLETON_ID, autoincrement=False)

    title = Column(String(200), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(50), nullable=False)
    location = Column(String(200), nullable=False)
    duration = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)

    instructor_name = Column(String(100), nullable=True)
    instructor_email = Column(String(255), nullable=True)

    # Capacity ceiling and the seats currently reserved against it
    max_participants = Column(Integer, nullable=False, default=100)
    seats_taken = Column(Integer, nullable=False, default=0)

    registration_deadline = Column(String(50), nullable=True)
    whatsapp_number = Column(String(20), nullable=True)
    whatsapp_group_link = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True)

    updated_by = Column(GUID, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<SeminarSettings {self.title} on {self.date}>"
