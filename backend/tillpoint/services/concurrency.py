"""Transaction runner with retry on optimistic-locking conflicts.

Sales, products and the invoice counter carry a version column. A write
based on a stale read fails at flush with StaleDataError; a racing insert
of the same unique key fails with IntegrityError. Either way the whole
operation is rolled back and re-run against fresh state.
"""
import logging
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from tillpoint.core.config import settings
from tillpoint.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_transaction(
    db: Session,
    operation: Callable[[], T],
    *,
    attempts: int | None = None,
    backoff_base: float = 0.05,
) -> T:
    """Run operation() and commit once; roll back on any failure.

    operation must do all of its reads itself so that a retry sees the
    state that won the race. Domain errors are never retried.
    """
    attempts = attempts or settings.CONFLICT_RETRIES
    for attempt in range(attempts):
        try:
            result = operation()
            db.commit()
            return result
        except (StaleDataError, IntegrityError, OperationalError) as exc:
            db.rollback()
            logger.warning(
                f"Write conflict (attempt {attempt + 1}/{attempts}): {type(exc).__name__}: {exc}"
            )
            if attempt >= attempts - 1:
                raise ConflictError("The record was changed by another request, please retry") from exc
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.rollback()
            raise
    raise ConflictError("The record was changed by another request, please retry")
