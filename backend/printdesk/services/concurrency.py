# Overview: Retry helper for store round-trips that hit lock conflicts.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, label: str = "store call"):
    """
    Run one store round-trip, retrying lock conflicts with exponential backoff.

    OperationalError covers "database is locked" and deadlocks; StaleDataError
    covers a row changed under an ORM flush. The session is rolled back before
    every retry. The last failure propagates unchanged.
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            if attempt == attempts:
                raise
            delay = backoff_base * (2 ** (attempt - 1))
            current_app.logger.warning(
                "%s hit a lock conflict (attempt %d/%d), retrying in %.2fs: %s",
                label, attempt, attempts, delay, exc,
            )
            time.sleep(delay)
