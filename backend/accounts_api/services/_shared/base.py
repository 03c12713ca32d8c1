from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from accounts_api.core import errors as api_errors
from accounts_api.services._shared.errors import (
    AuthError,
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    TokenInvalidError,
    UploadError,
    ValidationError,
)
from accounts_api.services._shared.result import Failure, Result, Success
from accounts_api.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

T = TypeVar("T")

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated account identifier, when known.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Turn every outcome into a tagged :class:`Success`/:class:`Failure`.
    * Centralize error translation for the HTTP layer.

    Notes
    -----
    - Services never touch the global session; they always use a Unit of Work.
    - Entry points raise taxonomy errors internally and return through :meth:`run`.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Outcome wrapping ----------------------------

    def run(self, operation: str, fn: Callable[[], T]) -> Result[T]:
        """
        Execute ``fn`` and wrap its outcome.

        Taxonomy errors become :class:`Failure` as-is. Anything else is logged
        with its traceback and becomes ``Failure(InternalError)``.

        :param operation: Name used in log records (e.g. ``"auth.login"``).
        :type operation: str
        :param fn: The orchestration body.
        :type fn: Callable[[], T]
        :returns: Tagged result.
        :rtype: Result[T]
        """
        try:
            return Success(fn())
        except ServiceError as exc:
            log.info("%s.failed: %s", operation, exc.__class__.__name__)
            return Failure(exc)
        except Exception:
            log.exception("%s.unexpected_error", operation, extra={"account_id": self.ctx.actor_id})
            return Failure(InternalError())

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within, or returned by, the service.
        :type exc: Exception
        :returns: Translated exception ready to be raised.
        :rtype: Exception
        """
        if isinstance(exc, ValidationError):
            return api_errors.BadRequest(str(exc))
        if isinstance(exc, TokenInvalidError):
            return api_errors.Unauthorized(str(exc), code="token_invalid")
        if isinstance(exc, AuthError):
            return api_errors.Unauthorized(str(exc))
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))
        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))
        if isinstance(exc, UploadError):
            return api_errors.BadGateway(str(exc))
        if isinstance(exc, InternalError):
            return api_errors.InternalServerError(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.BadRequest(str(exc))

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc

    def unwrap(self, result: Result[T]) -> T:
        """Return the success value or raise the translated API error."""
        if isinstance(result, Failure):
            raise self.translate_exceptions(result.error)
        return result.value
