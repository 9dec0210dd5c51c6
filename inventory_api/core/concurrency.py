from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(statement):
    """
    Apply row-level locking to a select.

    SQLite ignores SELECT ... FOR UPDATE; callers still need a guarded write.
    """
    return statement.with_for_update()


def run_with_retry(
    db: Session,
    func: Callable[[], T],
    *,
    attempts: int = 3,
    backoff_base: float = 0.05,
    label: str = "transaction",
) -> T:
    """
    Run a unit of work, rolling back and retrying on lock or serialization
    conflicts. Any other exception is rolled back and re-raised at once.
    """
    attempts = max(1, attempts)
    attempt = 1
    while True:
        try:
            return func()
        except RETRYABLE_ERRORS as exc:
            db.rollback()
            if attempt >= attempts:
                raise
            delay = backoff_base * (2 ** (attempt - 1))
            logger.warning(
                "%s conflict (attempt %s/%s), retrying in %.2fs: %s",
                label,
                attempt,
                attempts,
                delay,
                exc.__class__.__name__,
            )
            time.sleep(delay)
            attempt += 1
        except Exception:
            db.rollback()
            raise
