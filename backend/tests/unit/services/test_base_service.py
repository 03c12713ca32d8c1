"""Outcome wrapping and HTTP translation shared by every service."""

from __future__ import annotations

import pytest
from accounts_api.core import errors as api_errors
from accounts_api.services import BaseService, Failure, Success
from accounts_api.services._shared.errors import (
    AuthError,
    ConflictError,
    InternalError,
    NotFoundError,
    TokenInvalidError,
    UploadError,
    ValidationError,
)


@pytest.fixture()
def service() -> BaseService:
    return BaseService()


def test_run_wraps_value(service):
    result = service.run("demo", lambda: 42)

    assert result == Success(42)
    assert result.ok


def test_run_passes_service_errors_through(service):
    err = ValidationError("bad")

    def _fail():
        raise err

    result = service.run("demo", _fail)

    assert isinstance(result, Failure)
    assert result.error is err
    assert not result.ok


def test_run_hides_unexpected_errors(service):
    def _crash():
        raise KeyError("secret internals")

    result = service.run("demo", _crash)

    assert isinstance(result.error, InternalError)
    assert str(result.error) == "Something went wrong"


@pytest.mark.parametrize(
    "error, api_type, status",
    [
        (ValidationError("x"), api_errors.BadRequest, 400),
        (TokenInvalidError(), api_errors.Unauthorized, 401),
        (AuthError(), api_errors.Unauthorized, 401),
        (NotFoundError("User", 1), api_errors.NotFound, 404),
        (ConflictError("Account", "dup"), api_errors.Conflict, 409),
        (UploadError(), api_errors.BadGateway, 502),
        (InternalError(), api_errors.InternalServerError, 500),
    ],
)
def test_translate_exceptions(service, error, api_type, status):
    translated = service.translate_exceptions(error)

    assert isinstance(translated, api_type)
    assert translated.status_code == status


def test_token_errors_carry_their_own_code(service):
    translated = service.translate_exceptions(TokenInvalidError("Expired access token"))

    assert translated.code == "token_invalid"
    assert translated.message == "Expired access token"


def test_unwrap(service):
    assert service.unwrap(Success("ok")) == "ok"
    with pytest.raises(api_errors.Conflict):
        service.unwrap(Failure(ConflictError("Account", "dup")))
