"""Repository package exposing persistence-layer access for the mapped models."""

from __future__ import annotations

from accounts_api.repositories.account import AccountRepository
from accounts_api.repositories.base import BaseRepository

__all__ = ["AccountRepository", "BaseRepository"]
