"""
Read-only Unit of Work guards. The ORM and SQL guards are portable, so these
run on SQLite too; only ``SET TRANSACTION`` is dialect specific.
"""

import pytest
from accounts_api.models import Account
from accounts_api.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from accounts_api.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)
from sqlalchemy import func, select, text

from tests.factories.account import AccountFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, db, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(AccountFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, app, db, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("DELETE FROM accounts WHERE email = :email"), {"email": "x@example.com"}
            )

    def test_allows_reads(self, app, db, session):
        with RWuow() as uow:
            uow.accounts.add(AccountFactory.build())

        with ROuow() as uow:
            count = uow.session.execute(select(func.count()).select_from(Account)).scalar_one()
            assert count >= 1

    def test_disallows_commit(self, app, db, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_attempted_changes_do_not_persist(self, app, db, session):
        with RWuow() as uow:
            account = AccountFactory.build()
            uow.accounts.add(account)
            account_id = account.id
            original_email = account.email

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            acc = uow.session.get(Account, account_id)
            acc.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with RWuow() as uow:
            assert uow.accounts.get(account_id).email == original_email

    def test_guards_are_removed_on_exit(self, app, db, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.accounts.add(AccountFactory.build())
