"""Input rules shared by the registration, login and credential flows."""

from __future__ import annotations

from accounts_api.models.account import EMAIL_RE
from accounts_api.services._shared.errors import ValidationError

MIN_PASSWORD_LENGTH = 6


def require_fields(*values: str | None) -> None:
    """
    Enforce presence first, then non-blank content, across all ``values``.

    :raises ValidationError: ``"All fields are required"`` when any value is
        missing or empty; ``"Fields cannot contain only whitespace"`` when any
        value is whitespace only.
    """
    if any(v is None or v == "" for v in values):
        raise ValidationError("All fields are required")
    if any(not str(v).strip() for v in values):
        raise ValidationError("Fields cannot contain only whitespace")


def ensure_email(email: str) -> str:
    """Return the normalized email (trimmed, lower-cased) or raise."""
    normalized = email.strip().lower()
    if not EMAIL_RE.match(normalized):
        raise ValidationError("Invalid email format")
    return normalized


def ensure_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
