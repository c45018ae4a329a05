"""
Custom Exceptions for the Seminar Registration service
======================================================

Every rejection on the admission path is a typed exception. The API layer
turns them into structured JSON via ``error_response`` (see ``main.py``):

    {"success": false, "code": "...", "message": "...", ...extra}

Usage:
    from seminar.core.exceptions import DuplicateEmailError

    if existing:
        raise DuplicateEmailError(email)
"""

from typing import Optional, Any, Dict, List

from seminar.core.config import settings, build_whatsapp_link


class SeminarError(Exception):
    """Base exception for all service errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def payload(self) -> Dict[str, Any]:
        """Extra top-level keys merged into the response body"""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            data["details"] = self.details
        data.update(self.payload())
        return data


def contact_info(message: str, whatsapp_number: Optional[str] = None) -> Dict[str, str]:
    """Alternative contact channel offered whenever registration is refused"""
    number = whatsapp_number or settings.WHATSAPP_NUMBER
    return {
        "whatsapp": number,
        "whatsappLink": build_whatsapp_link(number),
        "message": message,
    }


# ============================================
# Admission Errors
# ============================================

class MaintenanceClosedError(SeminarError):
    """Registration is switched off by an admin"""

    status_code = 503

    def __init__(self, maintenance_message: str, whatsapp_number: Optional[str] = None):
        super().__init__(maintenance_message, code="REGISTRATION_CLOSED")
        self.contact = contact_info(
            "For urgent registrations or assistance, please contact us on WhatsApp.",
            whatsapp_number,
        )

    def payload(self) -> Dict[str, Any]:
        return {"contactInfo": self.contact}


class CapacityExceededError(SeminarError):
    """Seminar is full"""

    status_code = 409

    def __init__(self, max_participants: int, current_registrations: int,
                 whatsapp_number: Optional[str] = None):
        super().__init__(
            "Registration is full. Maximum capacity reached.",
            code="CAPACITY_EXCEEDED",
        )
        self.max_participants = max_participants
        self.current_registrations = current_registrations
        self.contact = contact_info(
            "Contact us on WhatsApp to join the waiting list.",
            whatsapp_number,
        )

    def payload(self) -> Dict[str, Any]:
        return {
            "data": {
                "maxParticipants": self.max_participants,
                "currentRegistrations": self.current_registrations,
            },
            "contactInfo": self.contact,
        }


class RegistrationValidationError(SeminarError):
    """One or more fields failed validation; carries one entry per field"""

    status_code = 400

    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed"):
        super().__init__(message, code="VALIDATION_ERROR")
        self.errors = errors

    def payload(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class VerificationFailedError(SeminarError):
    """Bot verification rejected the request or could not be completed"""

    status_code = 400

    def __init__(self, reason: str = "verification rejected"):
        super().__init__(
            "Bot verification failed. Please try again.",
            code="VERIFICATION_FAILED",
        )
        self.reason = reason


class DuplicateEmailError(SeminarError):
    """An active registration already uses this email"""

    status_code = 409

    def __init__(self, email: str):
        super().__init__(
            "This email is already registered. Please use a different email address.",
            code="DUPLICATE_EMAIL",
        )
        self.email = email


class PersistenceError(SeminarError):
    """Unexpected store failure while writing a registration"""

    status_code = 500

    def __init__(self, message: str = "Registration failed. Please try again later."):
        super().__init__(message, code="PERSISTENCE_ERROR")


# ============================================
# Resource / Admin Errors
# ============================================

class ResourceNotFoundError(SeminarError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class RegistrationNotFoundError(ResourceNotFoundError):
    def __init__(self, registration_id: str):
        super().__init__("Registration", registration_id)


class AuthenticationError(SeminarError):
    """Admin authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="AUTH_FAILED")


class ConflictError(SeminarError):
    """Write would violate a uniqueness rule"""

    status_code = 409

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="CONFLICT", details=details)


class EmailDisabledError(SeminarError):
    status_code = 409

    def __init__(self):
        super().__init__("Email service is disabled", code="EMAIL_DISABLED")


class TwoFactorError(SeminarError):
    """2FA setup or verification failed"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="TWO_FACTOR_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: SeminarError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        **error.to_dict()
    }
