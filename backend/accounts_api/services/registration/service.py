"""
AccountRegistrationService
==========================

Process-level service that provisions a new account:

- Validates the submitted fields and checks username/email uniqueness.
- Uploads the avatar (required) and the cover image (optional).
- Creates the ``Account`` row in one transaction and reads it back.
- Deletes every uploaded asset when any later step fails, so a failed
  registration leaves neither rows nor orphaned media behind.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from accounts_api.repositories.account import AccountRepository
from accounts_api.services._shared.base import BaseService, ServiceContext
from accounts_api.services._shared.errors import (
    ConflictError,
    InternalError,
    ServiceError,
    UploadError,
    ValidationError,
    violates,
)
from accounts_api.services._shared.policies.validation import (
    ensure_email,
    ensure_password,
    require_fields,
)
from accounts_api.services._shared.ports import MediaAsset, MediaStore
from accounts_api.services._shared.result import Result
from accounts_api.services.identity.dto import AccountPublicOut
from accounts_api.services.registration.dto import AccountRegistrationIn

log = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "User with email or username already exists"
UNIQUE_CONSTRAINTS = ("uq_accounts_username", "uq_accounts_email")


class AccountRegistrationService(BaseService):
    """
    Orchestrates account creation together with its remote media.
    """

    def __init__(self, *, media_store: MediaStore, ctx: ServiceContext | None = None) -> None:
        """
        :param media_store: Remote store receiving avatar and cover image.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.media = media_store

    def register(self, dto: AccountRegistrationIn) -> Result[AccountPublicOut]:
        """
        Register an account.

        :param dto: Registration input.
        :type dto: :class:`AccountRegistrationIn`
        :returns: ``Success(AccountPublicOut)`` or ``Failure`` carrying one of
            ``ValidationError``, ``ConflictError``, ``UploadError``, ``InternalError``.
        :rtype: Result[AccountPublicOut]
        """
        return self.run("registration.register", lambda: self._register(dto))

    # ------------------------------------------------------------------ #
    # Orchestration
    # ------------------------------------------------------------------ #

    def _register(self, dto: AccountRegistrationIn) -> AccountPublicOut:
        require_fields(dto.fullname, dto.email, dto.username, dto.password)
        email = ensure_email(dto.email or "")
        ensure_password(dto.password or "")
        username = (dto.username or "").strip()
        fullname = (dto.fullname or "").strip()

        with self.ro_uow() as uow_ro:
            repo_ro: AccountRepository = uow_ro.accounts
            if repo_ro.find_by_username_or_email(username, email) is not None:
                raise ConflictError("Account", DUPLICATE_MESSAGE)

        if not dto.avatar_path:
            raise ValidationError("Avatar file is required")

        avatar = self.media.upload(dto.avatar_path)
        cover: MediaAsset | None = None
        if dto.cover_image_path:
            try:
                cover = self.media.upload(dto.cover_image_path)
            except UploadError:
                self._compensate(avatar)
                raise
            except Exception as exc:
                log.exception("registration.cover_upload_failed")
                self._compensate(avatar)
                raise UploadError("Cover image upload failed") from exc

        try:
            with self.rw_uow() as uow:
                repo: AccountRepository = uow.accounts
                account = repo.model(
                    fullname=fullname,
                    email=email,
                    username=username,
                    password=dto.password,  # model setter hashes
                    avatar=avatar.url,
                    cover_image=cover.url if cover else "",
                )
                repo.add(account)

                created = repo.find_by_id(account.id, exclude_sensitive=True)
                if created is None:
                    raise InternalError("Something went wrong while registering the user")
                out = AccountPublicOut.from_model(created)
        except IntegrityError as exc:
            self._compensate(avatar, cover)
            if any(violates(exc, name) for name in UNIQUE_CONSTRAINTS):
                raise ConflictError("Account", DUPLICATE_MESSAGE) from exc
            log.exception("registration.integrity_error")
            raise InternalError("Something went wrong while registering the user") from exc
        except ServiceError:
            self._compensate(avatar, cover)
            raise
        except Exception as exc:
            log.exception("registration.create_failed")
            self._compensate(avatar, cover)
            raise InternalError("Something went wrong while registering the user") from exc

        log.info("registration.created", extra={"account_id": out.id})
        return out

    def _compensate(self, *assets: MediaAsset | None) -> None:
        """Best-effort removal of uploaded assets; never raises."""
        for asset in assets:
            if asset is None:
                continue
            log.warning(
                "registration.compensate",
                extra={"media_id": asset.id, "resource_kind": asset.resource_kind},
            )
            try:
                self.media.delete(asset.id, asset.resource_kind)
            except Exception:
                log.exception("registration.compensate_failed", extra={"media_id": asset.id})
