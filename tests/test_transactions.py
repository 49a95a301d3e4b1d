import pytest
from sqlalchemy.exc import OperationalError

from src.core.exceptions import (
    ConflictError, StorageError, TransactionTimeoutError, ValidationError,
)
from src.core import transactions
from src.core.transactions import unit_of_work
from src.models.organizations import Organization


class QueryCanceled(Exception):
    pgcode = "57014"


class IdleSessionKilled(Exception):
    pgcode = "25P03"


class ConnectionLost(Exception):
    pgcode = "08006"


class TestUnitOfWork:
    def test_commits_on_success(self, db):
        with unit_of_work(db, "create organization"):
            db.add(Organization(name="Committed"))
        db.expunge_all()
        assert db.query(Organization).filter_by(name="Committed").count() == 1

    def test_domain_error_rolls_back_and_propagates(self, db):
        with pytest.raises(ValidationError):
            with unit_of_work(db, "create organization"):
                db.add(Organization(name="Rolled back"))
                db.flush()
                raise ValidationError("bad input")
        assert db.query(Organization).filter_by(name="Rolled back").count() == 0

    def test_integrity_error_becomes_conflict(self, db):
        with pytest.raises(ConflictError):
            with unit_of_work(db, "create organization"):
                db.add(Organization(name="Twin"))
                db.add(Organization(name="Twin"))
                db.flush()
        assert db.query(Organization).count() == 0

    def test_statement_timeout_becomes_timeout_error(self, db):
        with pytest.raises(TransactionTimeoutError) as exc_info:
            with unit_of_work(db, "replace item stock", timeout=0.5):
                raise OperationalError("UPDATE stock_levels", {}, QueryCanceled())
        assert isinstance(exc_info.value, TimeoutError)
        assert exc_info.value.status_code == 504

    def test_overrunning_transaction_is_rolled_back(self, db, monkeypatch):
        ticks = iter([100.0, 102.5])
        monkeypatch.setattr(transactions, "monotonic", lambda: next(ticks))

        with pytest.raises(TransactionTimeoutError):
            with unit_of_work(db, "create organization", timeout=1.0):
                db.add(Organization(name="Too slow"))
                db.flush()
        assert db.query(Organization).filter_by(name="Too slow").count() == 0

    def test_transaction_within_limit_commits(self, db, monkeypatch):
        ticks = iter([100.0, 100.4])
        monkeypatch.setattr(transactions, "monotonic", lambda: next(ticks))

        with unit_of_work(db, "create organization", timeout=1.0):
            db.add(Organization(name="In time"))
        assert db.query(Organization).filter_by(name="In time").count() == 1

    def test_idle_in_transaction_timeout_becomes_timeout_error(self, db):
        with pytest.raises(TransactionTimeoutError):
            with unit_of_work(db, "replace item stock"):
                raise OperationalError("SELECT 1", {}, IdleSessionKilled())

    def test_other_operational_error_is_storage_error(self, db):
        with pytest.raises(StorageError) as exc_info:
            with unit_of_work(db, "replace item stock"):
                raise OperationalError("SELECT 1", {}, ConnectionLost())
        assert not isinstance(exc_info.value, TimeoutError)

    def test_unexpected_error_rolls_back(self, db):
        with pytest.raises(RuntimeError):
            with unit_of_work(db, "create organization"):
                db.add(Organization(name="Abandoned"))
                db.flush()
                raise RuntimeError("client went away")
        assert db.query(Organization).filter_by(name="Abandoned").count() == 0
