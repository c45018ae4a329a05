from sqlalchemy import Column, String, Boolean, DateTime, JSON, Enum as SQLEnum
from datetime import datetime
import enum

from seminar.core.database import Base
from seminar.core.types import GUID, NormalizedEmail, generate_uuid


class AdminRole(str, enum.Enum):
    """Admin roles"""
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AdminUser(Base):
    """Dashboard administrator"""
    __tablename__ = "admin_users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(NormalizedEmail, unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    role = Column(
        SQLEnum(AdminRole, name="admin_role", values_callable=lambda e: [m.value for m in e]),
        default=AdminRole.ADMIN,
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)

    # Two-factor authentication
    two_factor_enabled = Column(Boolean, default=False, nullable=False)
    two_factor_secret = Column(String(64), nullable=True)
    backup_codes = Column(JSON, nullable=True)  # list of unused codes
    temp_secret = Column(String(64), nullable=True)  # pending setup
    temp_secret_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<AdminUser {self.username}>"
