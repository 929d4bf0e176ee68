# Overview: Relational store collaborator; table-level reads and committed writes.

"""
Relational Store - the only path from the posting engine to the database.

Every operation is its own unit of work: writes commit before returning, so a
multi-step posting is a sequence of independent round-trips rather than one
ACID transaction. Callers that need all-or-nothing behaviour compensate
explicitly (see compensation.CompensationLog).

Filters are passed either as SQLAlchemy criteria (positional) or as
column=value equality pairs (keyword). Update patches may hold column
expressions, which is how conditional deltas are written:

    store.update(InventoryItem, {"stock": InventoryItem.stock - 2},
                 InventoryItem.stock >= 2, id="I00001")

Failures surface as StoreError after the session is rolled back.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StoreError
from ..extensions import db
from .concurrency import run_with_retry


def _where(model, criteria, filters) -> list:
    clauses = list(criteria)
    for key, value in filters.items():
        clauses.append(getattr(model, key) == value)
    return clauses


def _identity(model, row):
    values = tuple(row)
    if len(model.__mapper__.primary_key) == 1:
        return values[0]
    return values


class RelationalStore:
    """Generic select/insert/update/delete/count over mapped models."""

    def __init__(self, attempts: int | None = None):
        self._attempts = attempts

    @property
    def attempts(self) -> int:
        if self._attempts is not None:
            return self._attempts
        return int(current_app.config.get("STORE_RETRY_ATTEMPTS", 3))

    def _run(self, operation: str, model, func):
        try:
            return run_with_retry(
                func, attempts=self.attempts, label=f"{operation} on {model.__tablename__}"
            )
        except (SQLAlchemyError, OverflowError) as exc:
            # sqlite3 raises OverflowError unwrapped for integers beyond 64 bits
            db.session.rollback()
            reason = str(getattr(exc, "orig", None) or exc)
            current_app.logger.error(
                "Store %s on %s failed: %s", operation, model.__tablename__, reason
            )
            raise StoreError(
                f"Store {operation} on {model.__tablename__} failed",
                details={"table": model.__tablename__, "operation": operation, "reason": reason},
            ) from exc

    def select_one(self, model, *criteria, **filters):
        def _op():
            stmt = select(model).where(*_where(model, criteria, filters)).limit(1)
            return db.session.execute(stmt).scalars().first()

        return self._run("select", model, _op)

    def select_many(
        self,
        model,
        *criteria,
        order_by=None,
        limit: int | None = None,
        offset: int | None = None,
        **filters,
    ):
        """Return (rows, total_count); total_count ignores limit/offset."""
        def _op():
            stmt = select(model).where(*_where(model, criteria, filters))
            total = db.session.execute(
                select(func.count()).select_from(stmt.subquery())
            ).scalar_one()

            if order_by is not None:
                if isinstance(order_by, (list, tuple)):
                    stmt = stmt.order_by(*order_by)
                else:
                    stmt = stmt.order_by(order_by)
            if offset:
                stmt = stmt.offset(offset)
            if limit is not None:
                stmt = stmt.limit(limit)

            return db.session.execute(stmt).scalars().all(), total

        return self._run("select", model, _op)

    def count(self, model, *criteria, **filters) -> int:
        def _op():
            stmt = select(func.count()).select_from(model).where(*_where(model, criteria, filters))
            return db.session.execute(stmt).scalar_one()

        return self._run("count", model, _op)

    def insert(self, model, rows):
        """Insert one row (dict) or many (list of dicts); returns the inserted objects."""
        payload = [rows] if isinstance(rows, dict) else list(rows)

        def _op():
            objects = [model(**row) for row in payload]
            db.session.add_all(objects)
            db.session.commit()
            return objects

        return self._run("insert", model, _op)

    def update(self, model, patch: dict, *criteria, **filters):
        """
        Apply `patch` to every matching row; returns the affected rows reloaded.

        The UPDATE ... RETURNING is a single statement, so a criterion such as
        `stock >= q` is evaluated atomically with the write.
        """
        table = model.__table__
        primary_key = [col for col in table.primary_key.columns]

        def _op():
            stmt = (
                update(table)
                .where(*_where(model, criteria, filters))
                .values(patch)
                .returning(*primary_key)
            )
            keys = [_identity(model, row) for row in db.session.execute(stmt).all()]
            db.session.commit()
            return [db.session.get(model, key, populate_existing=True) for key in keys]

        return self._run("update", model, _op)

    def delete(self, model, *criteria, **filters) -> int:
        """Delete matching rows; returns the affected count."""
        def _op():
            stmt = delete(model.__table__).where(*_where(model, criteria, filters))
            result = db.session.execute(stmt)
            db.session.commit()
            return result.rowcount

        return self._run("delete", model, _op)


default_store = RelationalStore()
