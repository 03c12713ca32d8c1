from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any, Protocol

from accounts_api.services._shared.errors import TokenInvalidError


class TokenKind(StrEnum):
    """The two credential kinds; the value is the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenProvider(Protocol):
    """Port for issuing and verifying signed session tokens."""

    def issue_access_token(
        self, account_id: int, additional_claims: dict[str, Any] | None = None
    ) -> str: ...

    def issue_refresh_token(self, account_id: int) -> str: ...

    def verify(self, token: str, kind: TokenKind) -> int:
        """Return the account id, or raise ``TokenInvalidError``."""
        ...

    def decode(self, token: str, kind: TokenKind) -> dict[str, Any]: ...


class StubTokenProvider:
    """Deterministic, unsigned token provider used in unit tests.

    Tokens look like ``access.<id>.<seq>``; ``expire`` lets tests simulate
    expiry without touching the clock.
    """

    def __init__(self) -> None:
        self._now = datetime.now(tz=UTC)
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}
        self._expired: set[str] = set()

    def _mk(self, account_id: int, kind: TokenKind, ttl: timedelta, extra: dict[str, Any]) -> str:
        self._seq += 1
        token = f"{kind.value}.{account_id}.{self._seq}"
        self._issued[token] = {
            **extra,
            "sub": str(account_id),
            "type": kind.value,
            "jti": f"jti-{self._seq}",
            "exp": int((self._now + ttl).timestamp()),
        }
        return token

    def issue_access_token(
        self, account_id: int, additional_claims: dict[str, Any] | None = None
    ) -> str:
        return self._mk(account_id, TokenKind.ACCESS, timedelta(minutes=15), additional_claims or {})

    def issue_refresh_token(self, account_id: int) -> str:
        return self._mk(account_id, TokenKind.REFRESH, timedelta(days=10), {})

    def expire(self, token: str) -> None:
        self._expired.add(token)

    def decode(self, token: str, kind: TokenKind) -> dict[str, Any]:
        claims = self._issued.get(token)
        if claims is None or token in self._expired or claims["type"] != kind.value:
            raise TokenInvalidError("Invalid refresh token" if kind is TokenKind.REFRESH else None)
        return claims

    def verify(self, token: str, kind: TokenKind) -> int:
        return int(self.decode(token, kind)["sub"])
