"""Tagged outcome returned by every orchestrator entry point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from accounts_api.services._shared.errors import ServiceError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """
    Successful outcome.

    :param value: Payload produced by the operation.
    :type value: T
    """

    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class Failure:
    """
    Failed outcome carrying a taxonomy error.

    :param error: The service error describing the failure.
    :type error: ServiceError
    """

    error: ServiceError

    @property
    def ok(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None


Result = Success[T] | Failure

__all__ = ["Failure", "Result", "Success"]
