from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class TokenDenylistStore(Protocol):
    """
    Denylist of revoked **access tokens**, keyed by ``jti``.

    Methods are expected to be idempotent. Entries only need to live until
    the token's own expiry.
    """

    def is_revoked(self, jti: str) -> bool: ...
    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None: ...


class InMemoryDenylistStore:
    """Process-local denylist for tests and single-process development."""

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}

    def is_revoked(self, jti: str) -> bool:
        expires_at = self._revoked.get(jti)
        if expires_at is None:
            return False
        if expires_at <= datetime.now(UTC):
            del self._revoked[jti]
            return False
        return True

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        self._revoked[jti] = expires_at
