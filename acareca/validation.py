"""Field validation helpers shared by request models."""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable
from typing import Any

_EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)*$"
)
_E164_PATTERN = re.compile(r"^\+[1-9]?[0-9]{7,14}$")


class ValidationError(ValueError):
    """Raised when a request field fails validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def require_text(value: Any, field: str) -> str:
    """Return ``value`` if it is a non-empty string."""
    if not isinstance(value, str) or not value:
        raise ValidationError(field, "is required")
    return value


def require_email(value: Any, field: str) -> str:
    """Return ``value`` if it is a non-empty, well-formed e-mail address."""
    require_text(value, field)
    if not _EMAIL_PATTERN.match(value):
        raise ValidationError(field, "must be a valid email address")
    return value


def require_e164(value: Any, field: str) -> str:
    """Return ``value`` if it is a phone number in E.164 form."""
    if not isinstance(value, str) or not _E164_PATTERN.match(value):
        raise ValidationError(field, "must be an E.164 phone number")
    return value


def require_one_of(value: Any, allowed: Iterable[Any], field: str) -> Any:
    """Return ``value`` if it is one of ``allowed``."""
    choices = list(allowed)
    if value not in choices:
        listed = " ".join(str(choice) for choice in choices)
        raise ValidationError(field, f"must be one of: {listed}")
    return value


def require_range(
    value: Any,
    field: str,
    minimum: float | None = None,
    maximum: float | None = None,
) -> Any:
    """Return ``value`` if it is a number within the inclusive bounds given."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, "must be a number")
    if minimum is not None and value < minimum:
        raise ValidationError(field, f"must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationError(field, f"must be at most {maximum}")
    return value


def require_max_length(value: Any, limit: int, field: str) -> str:
    """Return ``value`` if it is a string no longer than ``limit`` characters."""
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    if len(value) > limit:
        raise ValidationError(field, f"must be at most {limit} characters")
    return value


def parse_uuid(value: Any, field: str) -> uuid.UUID:
    """Return ``value`` as a UUID, raising ValidationError if it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise ValidationError(field, "must be a valid UUID")
    try:
        return uuid.UUID(value)
    except ValueError as exc:
        raise ValidationError(field, "must be a valid UUID") from exc