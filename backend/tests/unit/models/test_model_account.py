"""Model-level tests for :class:`accounts_api.models.account.Account`."""

from __future__ import annotations

import pytest
from accounts_api.models.account import Account
from sqlalchemy.exc import IntegrityError

from tests.factories.account import DEFAULT_PASSWORD, AccountFactory


class TestAccountModel:
    def test_email_is_trimmed_and_lowercased(self, session):
        account = AccountFactory(email="  Mixed.Case@Example.COM ")
        assert account.email == "mixed.case@example.com"

    def test_invalid_email_is_rejected(self):
        with pytest.raises(ValueError, match="Invalid email format"):
            Account(email="not-an-email")

    def test_username_and_fullname_are_trimmed(self, session):
        account = AccountFactory(username="  alice ", fullname=" Alice Liddell  ")
        assert account.username == "alice"
        assert account.fullname == "Alice Liddell"

    def test_blank_username_is_rejected(self):
        with pytest.raises(ValueError, match="Username is required"):
            Account(username="   ")

    def test_avatar_is_required(self):
        with pytest.raises(ValueError, match="Avatar is required"):
            Account(avatar="")

    def test_password_is_hashed_and_write_only(self, session):
        account = AccountFactory(password="s3cret-pass")
        assert account.password_hash != "s3cret-pass"
        assert account.verify_password("s3cret-pass")
        assert not account.verify_password(DEFAULT_PASSWORD)
        with pytest.raises(AttributeError):
            _ = account.password

    def test_cover_image_defaults_to_empty(self, session):
        account = AccountFactory()
        session.flush()
        assert account.cover_image == ""
        assert account.refresh_token is None

    def test_timestamps_are_server_filled(self, session):
        account = AccountFactory()
        session.flush()
        session.refresh(account)
        assert account.created_at is not None
        assert account.updated_at is not None

    def test_repr_shows_username_only(self, session):
        account = AccountFactory(username="bob")
        text = repr(account)
        assert "bob" in text
        assert "password_hash" not in text

    @pytest.mark.parametrize("field", ["username", "email"])
    def test_unique_constraints(self, session, field):
        AccountFactory(username="taken", email="taken@example.com")
        session.commit()
        kwargs = {"username": "other", "email": "other@example.com"}
        kwargs[field] = "taken" if field == "username" else "taken@example.com"
        with pytest.raises(IntegrityError):
            AccountFactory(**kwargs)
        session.rollback()
