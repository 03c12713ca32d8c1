"""Account management API.

Exposes :func:`accounts_api.factory.create_app` so callers can write
``from accounts_api import create_app``.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
