"""Token cookie policy, built once from config at startup."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import cast

from flask import Flask, Response, current_app

from accounts_api.core.config import parse_duration

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
COOKIE_POLICY_KEY = "cookie_policy"


@dataclass(frozen=True, slots=True)
class CookiePolicy:
    """
    Attributes applied to both token cookies.

    :param secure: ``Secure`` flag; always on in production.
    :type secure: bool
    :param samesite: ``SameSite`` attribute.
    :type samesite: str
    :param access_max_age: Lifetime of the access cookie.
    :type access_max_age: timedelta
    :param refresh_max_age: Lifetime of the refresh cookie.
    :type refresh_max_age: timedelta
    """

    secure: bool
    samesite: str = "Lax"
    access_max_age: timedelta = timedelta(minutes=15)
    refresh_max_age: timedelta = timedelta(days=10)
    httponly: bool = True


def init_app(app: Flask) -> None:
    app.extensions[COOKIE_POLICY_KEY] = CookiePolicy(
        secure=bool(app.config.get("COOKIE_SECURE", False)),
        samesite=app.config.get("COOKIE_SAMESITE", "Lax"),
        access_max_age=parse_duration(app.config.get("ACCESS_TOKEN_EXPIRY", "15m")),
        refresh_max_age=parse_duration(app.config.get("REFRESH_TOKEN_EXPIRY", "10d")),
    )


def get_policy() -> CookiePolicy:
    return cast(CookiePolicy, current_app.extensions[COOKIE_POLICY_KEY])


def set_token_cookies(response: Response, *, access_token: str, refresh_token: str) -> Response:
    """Attach both token cookies to ``response``."""
    policy = get_policy()
    for name, value, max_age in (
        (ACCESS_COOKIE, access_token, policy.access_max_age),
        (REFRESH_COOKIE, refresh_token, policy.refresh_max_age),
    ):
        response.set_cookie(
            name,
            value,
            max_age=int(max_age.total_seconds()),
            httponly=policy.httponly,
            secure=policy.secure,
            samesite=policy.samesite,
        )
    return response


def clear_token_cookies(response: Response) -> Response:
    policy = get_policy()
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name, httponly=policy.httponly, secure=policy.secure, samesite=policy.samesite
        )
    return response
