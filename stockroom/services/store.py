"""
Storage port — runs a function as one atomic unit of work.

Everything the services read and write goes through the session handed to
the function. The unit of work either commits as a whole or is rolled back;
lock and serialization conflicts are retried from scratch a bounded number
of times before surfacing as StoreConflictError.
"""

import logging
import time

from sqlalchemy.exc import DBAPIError

from stockroom.errors import StoreConflictError

logger = logging.getLogger(__name__)

# Postgres: serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03"}
RETRYABLE_MESSAGES = (
    "database is locked",
    "database table is locked",
    "could not serialize access",
    "deadlock detected",
)


def _sqlstate(exc):
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_retryable(exc):
    if _sqlstate(exc) in RETRYABLE_SQLSTATES:
        return True
    msg = str(getattr(exc, "orig", exc)).lower()
    return any(k in msg for k in RETRYABLE_MESSAGES)


class SqlStore:
    def __init__(self, session_factory, attempts=3, backoff=0.05):
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self._session_factory = session_factory
        self.attempts = attempts
        self.backoff = backoff

    @property
    def session(self):
        """Session for advisory reads outside a unit of work."""
        return self._session_factory()

    def run(self, fn, *args, **kwargs):
        """
        Call fn(session, *args, **kwargs) inside a transaction and commit.
        Any exception rolls the whole unit of work back.
        """
        attempt = 0
        while True:
            attempt += 1
            session = self._session_factory()
            try:
                result = fn(session, *args, **kwargs)
                session.commit()
                return result
            except StoreConflictError as e:
                session.rollback()
                conflict = e
            except DBAPIError as e:
                session.rollback()
                if not is_retryable(e):
                    raise
                conflict = StoreConflictError(f"Store conflict: {e.orig}")
                conflict.__cause__ = e
            except Exception:
                session.rollback()
                raise

            if attempt >= self.attempts:
                logger.warning("unit of work %s gave up after %d attempts: %s",
                               getattr(fn, "__name__", fn), attempt, conflict.message)
                raise conflict
            logger.info("unit of work %s conflicted (attempt %d/%d), retrying",
                        getattr(fn, "__name__", fn), attempt, self.attempts)
            time.sleep(self.backoff * attempt)
