"""
IdentityService
===============

Aggregate service for an existing ``Account``:
- Read the sanitized current account.
- Password change (verification of the current password first).
- Avatar / cover image replacement through the media store.
"""

from __future__ import annotations

import logging

from werkzeug.security import generate_password_hash

from accounts_api.repositories.account import AccountRepository
from accounts_api.services._shared.base import BaseService, ServiceContext
from accounts_api.services._shared.errors import (
    AuthError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from accounts_api.services._shared.policies.validation import ensure_password
from accounts_api.services._shared.ports import MediaAsset, MediaStore
from accounts_api.services._shared.result import Result
from accounts_api.services.identity.dto import (
    AccountPublicOut,
    MediaUpdateIn,
    PasswordChangeIn,
)

log = logging.getLogger(__name__)


class IdentityService(BaseService):
    """
    Application service for credential and profile mutations.

    Replaced media are kept in the store; only a freshly uploaded asset whose
    URL could not be saved is deleted.
    """

    def __init__(self, *, media_store: MediaStore, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.media = media_store

    # --------------------------------------------------------------------- #
    # Queries
    # --------------------------------------------------------------------- #

    def get_account(self, account_id: int) -> Result[AccountPublicOut]:
        """
        Return the sanitized account.

        :param account_id: Account identifier.
        :type account_id: int
        :returns: ``Success(AccountPublicOut)`` or ``Failure(NotFoundError)``.
        """

        def _get() -> AccountPublicOut:
            with self.ro_uow() as uow:
                account = uow.accounts.find_by_id(account_id, exclude_sensitive=True)
                if account is None:
                    raise NotFoundError("User", account_id)
                return AccountPublicOut.from_model(account)

        return self.run("identity.get_account", _get)

    # --------------------------------------------------------------------- #
    # Password lifecycle
    # --------------------------------------------------------------------- #

    def change_password(self, dto: PasswordChangeIn) -> Result[None]:
        """
        Change the password after verifying the current one.

        :param dto: Password change input.
        :type dto: PasswordChangeIn
        :returns: ``Success(None)`` or ``Failure`` with ``ValidationError``,
            ``NotFoundError`` or ``AuthError``.
        """

        def _change() -> None:
            if not dto.old_password or not dto.new_password:
                raise ValidationError("All fields are required")
            if not dto.new_password.strip():
                raise ValidationError("Fields cannot contain only whitespace")
            ensure_password(dto.new_password)

            with self.rw_uow() as uow:
                repo: AccountRepository = uow.accounts
                account = repo.find_by_id(dto.account_id, exclude_sensitive=False)
                if account is None:
                    raise NotFoundError("User", dto.account_id)
                if not account.verify_password(dto.old_password):
                    raise AuthError("Invalid old password")
                repo.update_fields(
                    dto.account_id, password_hash=generate_password_hash(dto.new_password)
                )
            log.info("identity.password_changed", extra={"account_id": dto.account_id})

        return self.run("identity.change_password", _change)

    # --------------------------------------------------------------------- #
    # Media replacement
    # --------------------------------------------------------------------- #

    def update_avatar(self, dto: MediaUpdateIn) -> Result[AccountPublicOut]:
        """Replace the avatar; ``Failure`` carries Validation/Upload/NotFound/Internal errors."""
        return self.run(
            "identity.update_avatar",
            lambda: self._replace_media(dto, column="avatar", label="Avatar"),
        )

    def update_cover_image(self, dto: MediaUpdateIn) -> Result[AccountPublicOut]:
        """Replace the cover image; same failure modes as :meth:`update_avatar`."""
        return self.run(
            "identity.update_cover_image",
            lambda: self._replace_media(dto, column="cover_image", label="Cover image"),
        )

    def _replace_media(self, dto: MediaUpdateIn, *, column: str, label: str) -> AccountPublicOut:
        if not dto.local_path:
            raise ValidationError(f"{label} file is missing")

        asset = self.media.upload(dto.local_path)
        try:
            with self.rw_uow() as uow:
                repo: AccountRepository = uow.accounts
                if not repo.update_fields(dto.account_id, **{column: asset.url}):
                    raise NotFoundError("User", dto.account_id)
                account = repo.find_by_id(dto.account_id, exclude_sensitive=True)
                out = AccountPublicOut.from_model(account)
        except NotFoundError:
            self._discard(asset)
            raise
        except Exception as exc:
            log.exception("identity.media_update_failed", extra={"account_id": dto.account_id})
            self._discard(asset)
            raise InternalError(f"Error while updating {label.lower()}") from exc

        log.info(
            "identity.media_updated",
            extra={"account_id": dto.account_id, "media_id": asset.id},
        )
        return out

    def _discard(self, asset: MediaAsset) -> None:
        try:
            self.media.delete(asset.id, asset.resource_kind)
        except Exception:
            log.exception("identity.compensate_failed", extra={"media_id": asset.id})
