"""
accounts_api.services._shared.ports
===================================

*Ports* (hexagonal interfaces) the services depend on, plus the in-memory
doubles used by unit tests and local development.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` and :class:`~.TokenKind`, issuing and verifying
    access/refresh tokens.
- :mod:`denylist_store`:
    :class:`~.TokenDenylistStore`, revoked access-token ``jti`` storage.
- :mod:`media_store`:
    :class:`~.MediaStore` and :class:`~.MediaAsset`, remote media upload/delete.

Concrete adapters live under ``accounts_api.infra``.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .media_store import InMemoryMediaStore, MediaAsset, MediaStore, discard_local_file
from .token_provider import StubTokenProvider, TokenKind, TokenProvider

__all__ = [
    "InMemoryDenylistStore",
    "InMemoryMediaStore",
    "MediaAsset",
    "MediaStore",
    "StubTokenProvider",
    "TokenDenylistStore",
    "TokenKind",
    "TokenProvider",
    "discard_local_file",
]
