import os

import pytest
from accounts_api.repositories.account import AccountRepository
from accounts_api.services._shared.errors import (
    AuthError,
    InternalError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from accounts_api.services.identity.dto import (
    AccountPublicOut,
    MediaUpdateIn,
    PasswordChangeIn,
)
from accounts_api.services.identity.service import IdentityService

from tests.factories.account import DEFAULT_PASSWORD, AccountFactory


class TestIdentityService:
    """Validate IdentityService behaviours for an existing account."""

    @pytest.fixture()
    def service(self, media_store) -> IdentityService:
        """Return a fresh service instance per test."""
        return IdentityService(media_store=media_store)

    @pytest.fixture()
    def account(self, session):
        """A committed account, so failed units of work cannot roll it back."""
        acc = AccountFactory(avatar="https://media.local/image/upload/old-avatar.png")
        session.commit()
        return acc

    def _reload(self, session, account_id):
        found = AccountRepository(session=session).find_by_id(account_id, exclude_sensitive=False)
        session.refresh(found)
        return found

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def test_get_account_returns_sanitized_dto(self, service, account):
        result = service.get_account(account.id)

        assert result.ok
        out = result.value
        assert isinstance(out, AccountPublicOut)
        assert out.id == account.id
        assert out.email == account.email
        assert out.created_at is not None
        assert not hasattr(out, "refresh_token")

    def test_get_account_not_found(self, service):
        result = service.get_account(9999)

        assert isinstance(result.error, NotFoundError)
        assert str(result.error) == "User does not exist"

    # --------------------------------------------------------------------- #
    # Password change
    # --------------------------------------------------------------------- #

    def test_change_password_replaces_hash(self, service, session, account):
        result = service.change_password(
            PasswordChangeIn(
                account_id=account.id,
                old_password=DEFAULT_PASSWORD,
                new_password="brand-new-pass",
            )
        )

        assert result.ok
        stored = self._reload(session, account.id)
        assert stored.verify_password("brand-new-pass")
        assert not stored.verify_password(DEFAULT_PASSWORD)

    def test_change_password_rejects_wrong_old_password(self, service, session, account):
        result = service.change_password(
            PasswordChangeIn(account_id=account.id, old_password="nope", new_password="another1")
        )

        assert isinstance(result.error, AuthError)
        assert str(result.error) == "Invalid old password"
        assert self._reload(session, account.id).verify_password(DEFAULT_PASSWORD)

    @pytest.mark.parametrize(
        "old, new, message",
        [
            (None, "another1", "All fields are required"),
            (DEFAULT_PASSWORD, "", "All fields are required"),
            (DEFAULT_PASSWORD, "      ", "Fields cannot contain only whitespace"),
            (DEFAULT_PASSWORD, "abc", "Password must be at least 6 characters"),
        ],
    )
    def test_change_password_validation(self, service, account, old, new, message):
        result = service.change_password(
            PasswordChangeIn(account_id=account.id, old_password=old, new_password=new)
        )

        assert isinstance(result.error, ValidationError)
        assert str(result.error) == message

    def test_change_password_unknown_account(self, service):
        result = service.change_password(
            PasswordChangeIn(account_id=9999, old_password="whatever", new_password="another1")
        )

        assert isinstance(result.error, NotFoundError)

    # --------------------------------------------------------------------- #
    # Media replacement
    # --------------------------------------------------------------------- #

    def test_update_avatar_keeps_previous_asset(self, service, media_store, session, account, make_upload):
        path = make_upload("me.png")

        result = service.update_avatar(MediaUpdateIn(account_id=account.id, local_path=path))

        assert result.ok
        new_url = media_store.assets[media_store.uploads[0]].url
        assert result.value.avatar == new_url
        assert self._reload(session, account.id).avatar == new_url
        assert media_store.deletes == []
        assert not os.path.exists(path)

    def test_update_cover_image(self, service, media_store, session, account, make_upload):
        result = service.update_cover_image(
            MediaUpdateIn(account_id=account.id, local_path=make_upload("cover.jpg"))
        )

        assert result.ok
        assert result.value.cover_image.endswith(".jpg")
        assert result.value.avatar == "https://media.local/image/upload/old-avatar.png"

    @pytest.mark.parametrize(
        "method, message",
        [("update_avatar", "Avatar file is missing"), ("update_cover_image", "Cover image file is missing")],
    )
    def test_missing_file(self, service, media_store, account, method, message):
        result = getattr(service, method)(MediaUpdateIn(account_id=account.id, local_path=None))

        assert isinstance(result.error, ValidationError)
        assert str(result.error) == message
        assert media_store.uploads == []

    def test_upload_failure_leaves_account_untouched(
        self, service, media_store, session, account, make_upload
    ):
        media_store.fail_uploads_after = 0

        result = service.update_avatar(
            MediaUpdateIn(account_id=account.id, local_path=make_upload())
        )

        assert isinstance(result.error, UploadError)
        assert self._reload(session, account.id).avatar.endswith("old-avatar.png")

    def test_unknown_account_discards_new_asset(self, service, media_store, make_upload):
        result = service.update_avatar(MediaUpdateIn(account_id=9999, local_path=make_upload()))

        assert isinstance(result.error, NotFoundError)
        assert media_store.deletes == media_store.uploads
        assert media_store.assets == {}

    def test_persistence_failure_discards_new_asset(
        self, service, media_store, account, make_upload, monkeypatch
    ):
        def _boom(self, account_id, **values):
            raise RuntimeError("db gone")

        monkeypatch.setattr(AccountRepository, "update_fields", _boom)

        result = service.update_cover_image(
            MediaUpdateIn(account_id=account.id, local_path=make_upload())
        )

        assert isinstance(result.error, InternalError)
        assert str(result.error) == "Error while updating cover image"
        assert media_store.assets == {}
