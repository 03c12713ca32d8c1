"""Account repository: persistence for identity records and their credentials."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import or_, select
from sqlalchemy.orm import load_only

from accounts_api.models.account import SENSITIVE_COLUMNS, Account
from accounts_api.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    It never issues tokens nor talks to the media store; services do.
    """

    model = Account

    def _updatable_fields(self) -> set[str]:
        """Columns the services may rewrite after creation."""
        return {"refresh_token", "password_hash", "avatar", "cover_image"}

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_username_or_email(
        self, username: str | None = None, email: str | None = None
    ) -> Account | None:
        """Return the account whose username OR email matches.

        Inputs are trimmed (email is also lower-cased) before comparison.
        Blank inputs are ignored; ``None`` is returned when both are blank.

        :param username: Candidate username.
        :type username: str | None
        :param email: Candidate email.
        :type email: str | None
        :returns: Matching account or ``None``.
        :rtype: Account | None
        """
        clauses = []
        if username and username.strip():
            clauses.append(Account.username == username.strip())
        if email and email.strip():
            clauses.append(Account.email == email.strip().lower())
        if not clauses:
            return None
        stmt = select(Account).where(or_(*clauses)).limit(1)
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def find_by_id(self, account_id: int, *, exclude_sensitive: bool = True) -> Account | None:
        """Load an account by id, optionally without password hash and refresh token.

        :param account_id: Account primary key.
        :type account_id: int
        :param exclude_sensitive: Skip loading ``password_hash``/``refresh_token``.
        :type exclude_sensitive: bool
        :returns: Account or ``None``.
        :rtype: Account | None
        """
        stmt = select(Account).where(Account.id == account_id)
        if exclude_sensitive:
            public = [
                getattr(Account, name)
                for name in Account.__mapper__.column_attrs.keys()
                if name not in SENSITIVE_COLUMNS
            ]
            stmt = stmt.options(load_only(*public))
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Reduced-validation writes ----------------------------

    def update_fields(self, account_id: int, **values: Any) -> bool:
        """Persist whitelisted columns with one ``UPDATE``, without model validators.

        :param account_id: Account primary key.
        :type account_id: int
        :returns: ``True`` if a row was updated.
        :rtype: bool
        :raises ValueError: On a non-whitelisted column.
        """
        return self.update_columns(account_id, values) == 1

    def swap_refresh_token(self, account_id: int, expected: str, new: str | None) -> bool:
        """Replace the stored refresh token only if it still equals ``expected``.

        :param account_id: Account primary key.
        :type account_id: int
        :param expected: Refresh token the caller presented.
        :type expected: str
        :param new: Replacement value.
        :type new: str | None
        :returns: ``False`` when another writer rotated the token first.
        :rtype: bool
        """
        matched = self.update_columns(account_id, {"refresh_token": new}, refresh_token=expected)
        return matched == 1
