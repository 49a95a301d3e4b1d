# src/core/transactions.py
from contextlib import contextmanager
from time import monotonic
from typing import Optional
import logging

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import (
    InventoryException, ConflictError, StorageError, TransactionTimeoutError
)

logger = logging.getLogger(__name__)

# postgres query_canceled, raised when statement_timeout fires
QUERY_CANCELED = "57014"
# postgres idle_in_transaction_session_timeout
IDLE_IN_TRANSACTION_TIMEOUT = "25P03"


def _apply_timeouts(db: Session, timeout: Optional[float]) -> None:
    if not timeout:
        return
    if db.get_bind().dialect.name != "postgresql":
        return
    millis = int(timeout * 1000)
    db.execute(text(f"SET LOCAL statement_timeout = {millis}"))
    db.execute(text(f"SET LOCAL idle_in_transaction_session_timeout = {millis}"))


def _check_deadline(started: float, timeout: Optional[float], action: str) -> None:
    if not timeout:
        return
    elapsed = monotonic() - started
    if elapsed > timeout:
        logger.error(f"{action} took {elapsed:.2f}s, over the {timeout}s limit")
        raise TransactionTimeoutError(f"Could not {action}: transaction timed out")


def _is_timeout(exc: OperationalError) -> bool:
    pgcode = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if pgcode in (QUERY_CANCELED, IDLE_IN_TRANSACTION_TIMEOUT):
        return True
    return "statement timeout" in str(exc).lower()


@contextmanager
def unit_of_work(db: Session, action: str, timeout: Optional[float] = None):
    """
    Run the enclosed block as a single database transaction.

    Commits on success. Any failure rolls the whole transaction back before
    the error propagates, so callers never see partially committed state.

    ``timeout`` bounds the whole transaction: on PostgreSQL each statement
    and each idle gap is capped, and on any backend a block that overran
    is rolled back instead of committed.
    """
    started = monotonic()
    try:
        _apply_timeouts(db, timeout)
        yield db
        _check_deadline(started, timeout, action)
        db.commit()
    except InventoryException:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error during {action}: {e.orig}")
        raise ConflictError(f"Could not {action}: conflicting data")
    except OperationalError as e:
        db.rollback()
        if _is_timeout(e):
            logger.error(f"Timed out during {action} after {timeout}s")
            raise TransactionTimeoutError(f"Could not {action}: transaction timed out")
        logger.error(f"Database error during {action}: {e}")
        raise StorageError(f"Could not {action}: storage failure")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during {action}: {e}")
        raise StorageError(f"Could not {action}: storage failure")
    except BaseException:
        db.rollback()
        raise
