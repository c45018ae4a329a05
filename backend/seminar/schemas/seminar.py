from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime

from seminar.schemas.validation import check_email, check_length, check_pattern, check_required

SEMINAR_FIELD_MESSAGES: Dict[str, str] = {
    "title": "Title must be between 5 and 200 characters",
    "date": "Date must be in YYYY-MM-DD format",
    "time": "Time is required",
    "location": "Location must be between 5 and 200 characters",
    "duration": "Duration is required",
    "instructor_name": "Instructor name must be between 2 and 100 characters",
    "instructor_email": "Valid instructor email is required",
    "max_participants": "Max participants must be between 1 and 1000",
}


class SeminarSettingsUpdate(BaseModel):
    """Admin update of the seminar settings record"""
    model_config = ConfigDict(extra="ignore")

    title: str
    date: str
    time: str
    location: str
    duration: str
    description: Optional[str] = None
    instructor_name: str
    instructor_email: str
    max_participants: int
    registration_deadline: Optional[str] = None
    whatsapp_number: Optional[str] = Field(None, max_length=20)
    whatsapp_group_link: Optional[str] = Field(None, max_length=500)

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        return check_length(v, 5, 200, SEMINAR_FIELD_MESSAGES["title"])

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> str:
        message = SEMINAR_FIELD_MESSAGES["date"]
        if not isinstance(v, str):
            raise ValueError(message)
        v = check_pattern(v.strip(), r"\d{4}-\d{2}-\d{2}", message)
        try:
            datetime.strptime(v, "%Y-%m-%d")
        except ValueError:
            raise ValueError(message)
        return v

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v: Any) -> str:
        return check_required(v, SEMINAR_FIELD_MESSAGES["time"])

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, v: Any) -> str:
        return check_length(v, 5, 200, SEMINAR_FIELD_MESSAGES["location"])

    @field_validator("duration", mode="before")
    @classmethod
    def validate_duration(cls, v: Any) -> str:
        return check_required(v, SEMINAR_FIELD_MESSAGES["duration"])

    @field_validator("instructor_name", mode="before")
    @classmethod
    def validate_instructor_name(cls, v: Any) -> str:
        return check_length(v, 2, 100, SEMINAR_FIELD_MESSAGES["instructor_name"])

    @field_validator("instructor_email", mode="before")
    @classmethod
    def validate_instructor_email(cls, v: Any) -> str:
        return check_email(v, SEMINAR_FIELD_MESSAGES["instructor_email"])

    @field_validator("max_participants")
    @classmethod
    def validate_max_participants(cls, v: int) -> int:
        if not 1 <= v <= 1000:
            raise ValueError(SEMINAR_FIELD_MESSAGES["max_participants"])
        return v


class SeminarInfo(BaseModel):
    """Public subset of the seminar settings"""
    model_config = ConfigDict(from_attributes=True)

    title: str
    date: str
    time: str
    location: str
    duration: str
    description: Optional[str] = None
    instructor_name: Optional[str] = None
    max_participants: int
    registration_deadline: Optional[str] = None
    whatsapp_number: Optional[str] = None


class SeminarSettingsResponse(SeminarInfo):
    instructor_email: Optional[str] = None
    whatsapp_group_link: Optional[str] = None
    is_active: bool = True
    updated_at: Optional[datetime] = None
    currentRegistrations: int = 0
    availableSlots: int = 0
    isRegistrationFull: bool = False
