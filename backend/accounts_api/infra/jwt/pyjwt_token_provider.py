from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from accounts_api.services._shared.errors import TokenInvalidError
from accounts_api.services._shared.ports import TokenKind


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Signing material and lifetimes for both token kinds.

    :param access_secret: HMAC secret for access tokens.
    :type access_secret: str
    :param refresh_secret: HMAC secret for refresh tokens (must differ).
    :type refresh_secret: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param algorithm: JWS algorithm, ``HS256`` by default.
    :type algorithm: str
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=10)
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both token secrets are required.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh tokens must use distinct secrets.")


class PyJWTTokenProvider:
    """
    Issue and verify HS256 JWTs with PyJWT.

    Claims: ``sub`` (account id as string), ``type`` (``access``/``refresh``),
    ``jti`` (random, so two tokens are never identical), ``iat`` and ``exp``.
    The provider holds no Flask state; everything comes from :class:`TokenConfig`.
    """

    def __init__(self, config: TokenConfig) -> None:
        self.config = config

    def _secret(self, kind: TokenKind) -> str:
        return self.config.access_secret if kind is TokenKind.ACCESS else self.config.refresh_secret

    def _ttl(self, kind: TokenKind) -> timedelta:
        return self.config.access_expires if kind is TokenKind.ACCESS else self.config.refresh_expires

    def _encode(self, account_id: int, kind: TokenKind, extra: dict[str, Any] | None) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = dict(extra or {})
        payload.update(
            {
                "sub": str(account_id),
                "type": kind.value,
                "jti": uuid.uuid4().hex,
                "iat": now,
                "exp": now + self._ttl(kind),
            }
        )
        return jwt.encode(payload, self._secret(kind), algorithm=self.config.algorithm)

    def issue_access_token(
        self, account_id: int, additional_claims: dict[str, Any] | None = None
    ) -> str:
        return self._encode(account_id, TokenKind.ACCESS, additional_claims)

    def issue_refresh_token(self, account_id: int) -> str:
        return self._encode(account_id, TokenKind.REFRESH, None)

    def decode(self, token: str, kind: TokenKind) -> dict[str, Any]:
        """
        Verify signature, expiry and kind, and return the claims.

        :raises TokenInvalidError: On any verification failure.
        """
        label = "refresh" if kind is TokenKind.REFRESH else "access"
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.config.algorithm],
                options={"require": ["exp", "sub", "type", "jti"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenInvalidError(f"Expired {label} token") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError(f"Invalid {label} token") from exc
        if claims.get("type") != kind.value:
            raise TokenInvalidError(f"Invalid {label} token")
        return claims

    def verify(self, token: str, kind: TokenKind) -> int:
        claims = self.decode(token, kind)
        try:
            return int(claims["sub"])
        except (TypeError, ValueError) as exc:
            raise TokenInvalidError(f"Invalid {kind.value} token") from exc
