from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional
from datetime import datetime

from seminar.models.admin_user import AdminRole
from seminar.schemas.validation import check_email, check_length, check_required


class AdminLogin(BaseModel):
    username: str
    password: str

    @field_validator("username", mode="before")
    @classmethod
    def validate_username(cls, v: Any) -> str:
        return check_required(v, "Username is required")

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v: Any) -> str:
        if not isinstance(v, str) or not v:
            raise ValueError("Password is required")
        return v


class TwoFactorLogin(AdminLogin):
    """Second login step: TOTP code or backup code"""
    token: str = Field(..., min_length=6, max_length=8)


class TwoFactorToken(BaseModel):
    token: str = Field(..., pattern=r"^\d{6}$")


class PasswordConfirm(BaseModel):
    password: str = Field(..., min_length=1)


class AdminProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    role: AdminRole
    two_factor_enabled: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    username: str
    email: str

    @field_validator("username", mode="before")
    @classmethod
    def validate_username(cls, v: Any) -> str:
        return check_length(v, 3, 50, "Username must be between 3 and 50 characters")

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: Any) -> str:
        return check_email(v, "Valid email is required")


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")

    @field_validator("current_password", mode="before")
    @classmethod
    def validate_current(cls, v: Any) -> str:
        if not isinstance(v, str) or not v:
            raise ValueError("Current password is required")
        return v

    @field_validator("new_password", mode="before")
    @classmethod
    def validate_new(cls, v: Any) -> str:
        if not isinstance(v, str) or len(v) < 6:
            raise ValueError("New password must be at least 6 characters")
        return v


class RegistrationControlUpdate(BaseModel):
    enabled: bool
    message: Optional[str] = Field(None, max_length=500)


class EmailControlUpdate(BaseModel):
    enabled: bool


class ControlResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class RegistrationControlResponse(ControlResponse):
    maintenance_message: str


class TwoFactorSetupResponse(BaseModel):
    qrCode: str
    manualEntryKey: str
    expiresAt: datetime


class BackupCodesResponse(BaseModel):
    backupCodes: List[str]


class ReminderReport(BaseModel):
    total: int
    sent: int
    failed: int
    message: str
