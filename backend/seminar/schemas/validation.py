"""
Field-level validation helpers shared by request schemas.

Validation failures are reported as ``[{"field": ..., "message": ...}]``,
one entry per offending field, whatever model produced them.
"""
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from email_validator import validate_email, EmailNotValidError
from pydantic import ValidationError


def check_email(value: Any, message: str) -> str:
    """Validate and normalize an email address, raising ValueError(message)"""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    try:
        result = validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise ValueError(message)
    return result.normalized.lower()


def check_length(value: Any, min_len: int, max_len: int, message: str) -> str:
    if not isinstance(value, str):
        raise ValueError(message)
    value = value.strip()
    if not (min_len <= len(value) <= max_len):
        raise ValueError(message)
    return value


def check_pattern(value: str, pattern: str, message: str) -> str:
    if not re.fullmatch(pattern, value):
        raise ValueError(message)
    return value


def check_required(value: Any, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(message)
    return str(value).strip()


def _error_field(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return parts[0] if parts else "body"


def field_errors(
    errors: Iterable[Mapping[str, Any]],
    messages: Optional[Dict[str, str]] = None,
) -> List[Dict[str, str]]:
    """
    Flatten pydantic error dicts into one {field, message} entry per field.

    Errors raised from our own validators keep their message; structural
    errors (missing, wrong type, bad enum member) use ``messages[field]``.
    """
    messages = messages or {}
    collected: Dict[str, str] = {}
    for err in errors:
        field = _error_field(err.get("loc", ()))
        if field in collected:
            continue
        ctx_error = (err.get("ctx") or {}).get("error")
        if err.get("type") == "value_error" and ctx_error is not None:
            collected[field] = str(ctx_error)
        else:
            collected[field] = messages.get(field, err.get("msg", "Invalid value"))
    return [{"field": field, "message": message} for field, message in collected.items()]


def collect_field_errors(exc: ValidationError, messages: Optional[Dict[str, str]] = None) -> List[Dict[str, str]]:
    return field_errors(exc.errors(), messages)
