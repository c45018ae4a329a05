"""Custom SQLAlchemy column types shared by the models"""
from sqlalchemy import TypeDecorator, String
import uuid


def generate_uuid():
    """Generate a UUID string"""
    return str(uuid.uuid4())


def normalize_email(value: str) -> str:
    return value.strip().lower()


class GUID(TypeDecorator):
    """UUIDs stored as VARCHAR(36) on every backend"""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return str(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return str(value) if value is not None else None


class NormalizedEmail(TypeDecorator):
    """
    Email column that is always written and compared in normalized form.

    Comparisons such as ``Registration.email == "Jane@Example.com"`` bind
    through this type, so lookups are case-insensitive without callers
    having to remember to lower-case first.
    """
    impl = String(255)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return normalize_email(str(value))
