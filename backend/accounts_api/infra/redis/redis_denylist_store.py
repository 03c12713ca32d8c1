from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]


class RedisTokenDenylistStore:
    """
    Denylist for **access tokens** by jti.

    Each revoked jti is a marker key whose TTL matches the token's remaining
    lifetime, so entries disappear on their own once the token is useless.
    """

    prefix = "deny:at:"

    def __init__(self, r: redis.Redis):
        self.r = r

    def _k(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    def is_revoked(self, jti: str) -> bool:
        return cast(int, self.r.exists(self._k(jti))) == 1

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        ttl = int(expires_at.timestamp() - datetime.now(UTC).timestamp())
        if ttl <= 0:
            # already expired; the verifier rejects it anyway
            return
        self.r.set(self._k(jti), "1", ex=ttl)
