"""
DTOs for IdentityService.

Data Transfer Objects isolate the service layer from ORM models, so no
password hash or refresh token ever leaves a service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for changing an account's password.

    :param account_id: Authenticated account identifier.
    :type account_id: int
    :param old_password: Current password.
    :type old_password: str | None
    :param new_password: New password (raw).
    :type new_password: str | None
    """

    account_id: int
    old_password: str | None
    new_password: str | None


@dataclass(frozen=True, slots=True)
class MediaUpdateIn:
    """
    Input DTO for replacing the avatar or the cover image.

    :param account_id: Authenticated account identifier.
    :type account_id: int
    :param local_path: Staged upload, ``None`` when no file was sent.
    :type local_path: str | None
    """

    account_id: int
    local_path: str | None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class AccountPublicOut:
    """
    Sanitized account: never carries the password hash or refresh token.

    :param id: Account identifier.
    :type id: int
    :param username: Username.
    :type username: str
    :param email: Email address.
    :type email: str
    :param fullname: Display name.
    :type fullname: str
    :param avatar: Avatar URL.
    :type avatar: str
    :param cover_image: Cover image URL, ``""`` when absent.
    :type cover_image: str
    :param created_at: Creation timestamp.
    :type created_at: datetime | None
    :param updated_at: Last update timestamp.
    :type updated_at: datetime | None
    """

    id: int
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, account) -> AccountPublicOut:
        """Map an ORM :class:`~accounts_api.models.account.Account`."""
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            fullname=account.fullname,
            avatar=account.avatar,
            cover_image=account.cover_image or "",
            created_at=account.created_at,
            updated_at=account.updated_at,
        )
