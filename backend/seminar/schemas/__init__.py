from seminar.schemas.registration import (
    RegistrationCreate,
    RegistrationUpdate,
    RegistrationPublic,
    RegistrationAccepted,
    RegistrationAdminView,
    REGISTRATION_FIELD_MESSAGES,
)
from seminar.schemas.seminar import (
    SeminarSettingsUpdate,
    SeminarInfo,
    SeminarSettingsResponse,
    SEMINAR_FIELD_MESSAGES,
)
from seminar.schemas.validation import collect_field_errors, field_errors
