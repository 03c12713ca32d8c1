"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import os
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from werkzeug.utils import secure_filename

from accounts_api.api.cookies import ACCESS_COOKIE
from accounts_api.core.errors import Unauthorized
from accounts_api.core.extensions import get_denylist, get_media_store, get_token_provider
from accounts_api.services import (
    AccountRegistrationService,
    AuthService,
    IdentityService,
    ServiceContext,
)
from accounts_api.services._shared.errors import TokenInvalidError
from accounts_api.services._shared.ports import TokenKind, discard_local_file

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------ Responses ------------------------------------


def json_response(data: Any, message: str, *, status: int = 200) -> Response:
    """Return the ``{"data": ..., "message": ...}`` envelope."""
    response = jsonify({"data": data, "message": message})
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# ------------------------------ Services --------------------------------------


def _ctx() -> ServiceContext:
    return ServiceContext(
        actor_id=getattr(g, "account_id", None),
        request_id=getattr(g, "request_id", None),
    )


def registration_service() -> AccountRegistrationService:
    return AccountRegistrationService(media_store=get_media_store(), ctx=_ctx())


def auth_service() -> AuthService:
    return AuthService(
        token_provider=get_token_provider(),
        denylist_store=get_denylist(),
        mask_unknown_account=bool(current_app.config.get("AUTH_MASK_UNKNOWN_ACCOUNT", False)),
        ctx=_ctx(),
    )


def identity_service() -> IdentityService:
    return IdentityService(media_store=get_media_store(), ctx=_ctx())


# ------------------------------ Authentication --------------------------------


def _presented_access_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(ACCESS_COOKIE) or None


def require_auth(func: F) -> F:
    """Require a valid, non-revoked access token.

    The token comes from ``Authorization: Bearer`` or the access cookie. On
    success ``g.account_id`` and ``g.access_token`` are set.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = _presented_access_token()
        if not token:
            raise Unauthorized("Unauthorized request")
        provider = get_token_provider()
        try:
            claims = provider.decode(token, TokenKind.ACCESS)
        except TokenInvalidError as exc:
            raise Unauthorized(str(exc), code="token_invalid") from exc
        if get_denylist().is_revoked(str(claims.get("jti", ""))):
            raise Unauthorized("Token has been revoked", code="token_revoked")
        g.account_id = int(claims["sub"])
        g.access_token = token
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


# ------------------------------ Uploads ---------------------------------------


def _stage(field: str) -> str | None:
    storage = request.files.get(field)
    if storage is None or not storage.filename:
        return None
    tmp_dir = current_app.config.get("UPLOAD_TMP_DIR", "./public/temp")
    os.makedirs(tmp_dir, exist_ok=True)
    name = secure_filename(storage.filename) or "upload"
    path = os.path.join(tmp_dir, f"{uuid.uuid4().hex}-{name}")
    storage.save(path)
    return path


@contextmanager
def staged_uploads(*fields: str) -> Iterator[dict[str, str | None]]:
    """Save multipart files under ``UPLOAD_TMP_DIR`` for the duration of a request.

    Yields ``{field: path or None}``. Files the media store did not consume
    (and remove) are deleted on exit.
    """
    staged: dict[str, str | None] = {}
    try:
        for field in fields:
            staged[field] = _stage(field)
        yield staged
    finally:
        for path in staged.values():
            if path:
                discard_local_file(path)
