from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
)
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional
from datetime import datetime

from seminar.models.registration import Branch, YearOfStudy, WorkshopAttendance, RegistrationStatus
from seminar.schemas.validation import check_email, check_length, check_pattern

FULL_NAME_LENGTH_MSG = "Full name must be between 3 and 100 characters"
FULL_NAME_CHARS_MSG = "Full name should only contain letters and spaces"
EMAIL_MSG = "Please provide a valid email address"
PHONE_MSG = "Phone number must be exactly 10 digits"
GITHUB_LENGTH_MSG = "GitHub username must be between 1 and 39 characters"
GITHUB_CHARS_MSG = "GitHub username can only contain letters, numbers, and hyphens"
CONSENT_MSG = "You must agree to receive emails"
TOKEN_MSG = "Verification token is required"

# Messages for structural failures (missing field, wrong type, unknown enum value)
REGISTRATION_FIELD_MESSAGES: Dict[str, str] = {
    "fullName": FULL_NAME_LENGTH_MSG,
    "email": EMAIL_MSG,
    "phone": PHONE_MSG,
    "branch": "Please select a valid branch",
    "yearOfStudy": "Please select a valid year of study",
    "workshopAttendance": "Please select workshop attendance",
    "githubUsername": GITHUB_LENGTH_MSG,
    "consent": "Consent must be a boolean value",
    "verificationToken": TOKEN_MSG,
}


class RegistrationFields(BaseModel):
    """Registrant details shared by public submission and admin edits"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    full_name: str = Field(alias="fullName")
    email: str
    phone: str
    branch: Branch
    year_of_study: YearOfStudy = Field(alias="yearOfStudy")
    workshop_attendance: WorkshopAttendance = Field(alias="workshopAttendance")
    github_username: Optional[str] = Field(None, alias="githubUsername")

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_full_name(cls, v: Any) -> str:
        v = check_length(v, 3, 100, FULL_NAME_LENGTH_MSG)
        return check_pattern(v, r"[a-zA-Z\s]+", FULL_NAME_CHARS_MSG)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email_field(cls, v: Any) -> str:
        return check_email(v, EMAIL_MSG)

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, v: Any) -> str:
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str):
            raise ValueError(PHONE_MSG)
        return check_pattern(v.strip(), r"\d{10}", PHONE_MSG)

    @field_validator("github_username", mode="before")
    @classmethod
    def validate_github_username(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            # Empty form input means "not provided"
            return None
        v = check_length(v, 1, 39, GITHUB_LENGTH_MSG)
        return check_pattern(v, r"[a-zA-Z0-9-]+", GITHUB_CHARS_MSG)


class RegistrationCreate(RegistrationFields):
    """Public registration form submission"""

    consent: StrictBool
    verification_token: str = Field(
        validation_alias=AliasChoices("verificationToken", "recaptchaToken"),
    )

    @field_validator("consent")
    @classmethod
    def validate_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError(CONSENT_MSG)
        return v

    @field_validator("verification_token", mode="before")
    @classmethod
    def validate_token(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError(TOKEN_MSG)
        return v.strip()


class RegistrationUpdate(RegistrationFields):
    """Admin edit of an existing registration"""
    pass


class RegistrationPublic(BaseModel):
    """Fields returned to the registrant after submission or lookup"""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    full_name: str
    email: str
    registration_date: datetime


class RegistrationAccepted(RegistrationPublic):
    email_sent: bool


class RegistrationAdminView(BaseModel):
    """Full registration record for the admin dashboard"""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    full_name: str
    email: str
    phone: str
    branch: Branch
    year_of_study: YearOfStudy
    workshop_attendance: WorkshopAttendance
    github_username: Optional[str] = None
    consent: bool
    status: RegistrationStatus
    email_sent: bool
    email_sent_date: Optional[datetime] = None
    registration_date: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
