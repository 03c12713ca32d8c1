"""Service layer public API.

This package exposes the orchestrators and their DTOs so that callers can
import from :mod:`accounts_api.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``accounts_api.services._shared``)
    * :class:`BaseService`, :class:`ServiceContext`
    * :class:`Success`, :class:`Failure`, :data:`Result`

- Registration (from ``accounts_api.services.registration``)
    * :class:`AccountRegistrationService`, :class:`AccountRegistrationIn`

- Authentication (from ``accounts_api.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`LoginOut`, :class:`RefreshIn`,
      :class:`LogoutIn`, :class:`TokenPairOut`

- Identity (from ``accounts_api.services.identity``)
    * :class:`IdentityService`
    * DTOs: :class:`AccountPublicOut`, :class:`PasswordChangeIn`, :class:`MediaUpdateIn`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from ._shared.result import Failure, Result, Success
from .auth.dto import LoginIn, LoginOut, LogoutIn, RefreshIn, TokenPairOut
from .auth.service import AuthService
from .identity.dto import AccountPublicOut, MediaUpdateIn, PasswordChangeIn
from .identity.service import IdentityService
from .registration.dto import AccountRegistrationIn
from .registration.service import AccountRegistrationService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    "Success",
    "Failure",
    "Result",
    # Registration
    "AccountRegistrationService",
    "AccountRegistrationIn",
    # Auth
    "AuthService",
    "LoginIn",
    "LoginOut",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
    # Identity
    "IdentityService",
    "AccountPublicOut",
    "PasswordChangeIn",
    "MediaUpdateIn",
]
