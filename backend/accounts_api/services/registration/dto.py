"""
DTOs for AccountRegistrationService.

The orchestrator returns :class:`~accounts_api.services.identity.dto.AccountPublicOut`.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AccountRegistrationIn:
    """
    Input payload for the registration process.

    Text fields stay optional so that "missing" can be reported by the
    service rather than by the transport.

    :param fullname: Display name.
    :type fullname: str | None
    :param email: Login email (trimmed and lower-cased before use).
    :type email: str | None
    :param username: Public handle (trimmed before use).
    :type username: str | None
    :param password: Raw password (the model setter hashes it).
    :type password: str | None
    :param avatar_path: Staged avatar file; required.
    :type avatar_path: str | None
    :param cover_image_path: Staged cover image file; optional.
    :type cover_image_path: str | None
    """

    fullname: str | None
    email: str | None
    username: str | None
    password: str | None
    avatar_path: str | None = None
    cover_image_path: str | None = None
