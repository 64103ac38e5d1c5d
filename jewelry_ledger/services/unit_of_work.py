"""
Atomic execution of ledger mutations.

Every mutation runs inside a SAVEPOINT so a failure undoes its
own writes and nothing else in the caller's session.

A lost race with another writer shows up in one of several
ways depending on the database: a stale balance_version, a lock
or serialization failure, a deadlock, or two writers taking the
same reference number. All of them are retried with exponential
backoff and end in ContentionError when attempts run out. Every
other error propagates unchanged.

A retry rolls back the whole session transaction so the next
attempt reads a fresh snapshot. That is only safe when the
mutation is the first write of the caller's transaction, which
is how the API uses services (one mutation, then commit). When
the caller already holds uncommitted writes, contention is
raised at once and the caller decides whether to start over.
"""

import logging
import time
from typing import Callable, TypeVar

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from jewelry_ledger.config import Settings
from jewelry_ledger.exceptions import ContentionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})

HAS_WRITES = "jewelry_ledger.has_writes"


@event.listens_for(Session, "after_flush")
def _remember_writes(session, flush_context):
    session.info[HAS_WRITES] = True


@event.listens_for(Session, "after_transaction_end")
def _forget_writes(session, transaction):
    if transaction.parent is None:
        session.info.pop(HAS_WRITES, None)


def is_contention(error: Exception) -> bool:
    """True for errors caused by a concurrent writer."""
    if isinstance(error, StaleDataError):
        return True
    if isinstance(error, IntegrityError):
        # only the per-day reference sequence can collide between writers
        return "reference_number" in str(error.orig)
    if isinstance(error, OperationalError):
        if getattr(error.orig, "pgcode", None) in RETRYABLE_SQLSTATES:
            return True
        return "database is locked" in str(error.orig)
    return False


def owns_transaction(db: Session) -> bool:
    """Whether the session holds no writes of the caller's own."""
    if db.in_nested_transaction():
        return False
    if db.new or db.dirty or db.deleted:
        return False
    return not db.info.get(HAS_WRITES, False)


def run_atomic(
    db: Session,
    operation: Callable[[], T],
    settings: Settings,
    label: str,
) -> T:
    """
    Run operation inside a savepoint, retrying when a concurrent
    writer gets in the way.

    The operation must reload whatever it reads on each call:
    after a rollback the retry has to see the winner's committed
    state.
    """
    attempts = max(1, settings.BALANCE_RETRY_ATTEMPTS)
    delay = settings.BALANCE_RETRY_BASE_DELAY
    retry_whole_transaction = owns_transaction(db)

    for attempt in range(1, attempts + 1):
        try:
            with db.begin_nested():
                return operation()
        except (StaleDataError, OperationalError, IntegrityError) as e:
            if not is_contention(e):
                raise
            if not retry_whole_transaction:
                logger.warning(
                    "Contention during %s inside a larger unit of work: %s",
                    label, e.__class__.__name__,
                )
                raise ContentionError(
                    f"Could not {label}: another writer changed the same "
                    f"records; retry the whole operation"
                ) from e
            db.rollback()
            if attempt == attempts:
                break
            logger.warning(
                "Contention during %s (%s, attempt %d/%d), retrying in %.3fs",
                label, e.__class__.__name__, attempt, attempts, delay,
            )
            time.sleep(delay)
            delay = min(delay * 2, settings.BALANCE_RETRY_MAX_DELAY)

    logger.error("Gave up on %s after %d attempts", label, attempts)
    raise ContentionError(
        f"Could not {label}: records kept changing after {attempts} attempts"
    )
