"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They are the stable contract between repositories, adapters
and application services.

Orchestrators never let them escape: ``BaseService.run`` turns them into
:class:`~accounts_api.services._shared.result.Failure` values, and the API
layer maps those to RFC 7807 responses through
``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g. ``uq_accounts_email``).

    Returns
    -------
    bool
        True if the driver message mentions the constraint.

    Notes
    -----
    SQLite reports the column (``accounts.email``) rather than the constraint
    name, so the column suffix of the convention name is matched as well.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    # uq_<table>_<column> -> <table>.<column>
    parts = name.split("_", 2)
    return len(parts) == 3 and f"{parts[1]}.{parts[2]}" in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``message`` is safe to show to API clients.
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def __str__(self) -> str:
        return self.message


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """Malformed or missing input."""

    default_message = "Invalid input"


@dataclass(slots=True, eq=False)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __post_init__(self) -> None:
        ServiceError.__init__(self, self.detail)

    def __str__(self) -> str:
        return self.detail


@dataclass(slots=True, eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __post_init__(self) -> None:
        ServiceError.__init__(self, f"{self.entity} does not exist")

    def __str__(self) -> str:
        return f"{self.entity} does not exist"


class AuthError(ServiceError):
    """Bad credentials, or a refresh token that is missing, mismatched or rotated."""

    default_message = "Unauthorized request"


class TokenInvalidError(ServiceError):
    """Token signature, expiry or kind check failed."""

    default_message = "Invalid or expired token"


class UploadError(ServiceError):
    """The media store rejected or could not receive a file."""

    default_message = "Media upload failed"


class InternalError(ServiceError):
    """Unexpected failure after partial work; already compensated."""

    default_message = "Something went wrong"


__all__ = [
    "AuthError",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "ServiceError",
    "TokenInvalidError",
    "UploadError",
    "ValidationError",
    "violates",
]
