"""
Pytest fixtures for PrintDesk backend tests.

Provides an in-memory database, the sample directory rows used by the
posting scenarios, and a store that injects failures for compensation tests.
"""

from collections import Counter
from datetime import timedelta
from decimal import Decimal

import pytest
from printdesk import create_app
from printdesk.errors import StoreError
from printdesk.extensions import db
from printdesk.models import Customer, InventoryItem, Membership, Printer, Staff
from printdesk.services.store import RelationalStore
from printdesk.time_utils import today


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_RETRY_ATTEMPTS': 1,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def directory(db_session):
    """Customers C00001-C00003, staff S00001, printer P00001."""
    db_session.add_all([
        Customer(id="C00001", name="Ahmad Suki", phone="081111111111"),
        Customer(id="C00002", name="Faiz Rungkut", phone="081222222222"),
        Customer(id="C00003", name="Chisato Nishikigi", phone="081333333333"),
        Staff(id="S00001", name="Dzaky Indomie", gender="M"),
        Printer(id="P00001", is_operational=True, condition="Excellent"),
    ])
    db_session.commit()


@pytest.fixture(scope='function')
def inventory(db_session):
    """I00001 ink (50 @ 150000), I00003 paper (100 @ 50000)."""
    db_session.add_all([
        InventoryItem(id="I00001", name="Black Ink Cartridge XL", stock=50, unit_price=Decimal("150000.00")),
        InventoryItem(id="I00003", name="A4 Printer Paper (500 sheets)", stock=100, unit_price=Decimal("50000.00")),
    ])
    db_session.commit()


@pytest.fixture(scope='function')
def make_membership(db_session):
    """Create a membership; expires one year from today unless told otherwise."""
    def _make(customer_id: str, points: int, expires_in_days: int = 365) -> Membership:
        membership = Membership(
            customer_id=customer_id,
            expires_on=today() + timedelta(days=expires_in_days),
            points=points,
        )
        db_session.add(membership)
        db_session.commit()
        return membership

    return _make


def stock_of(item_id: str) -> int:
    """Current stock read straight from the database."""
    db.session.expire_all()
    return db.session.get(InventoryItem, item_id).stock


def points_of(customer_id: str) -> int:
    db.session.expire_all()
    return db.session.query(Membership).filter_by(customer_id=customer_id).one().points


class FailingStore(RelationalStore):
    """
    RelationalStore that raises StoreError on the n-th call of a given
    operation against a given model. Other calls pass through.

    before() runs an action once, right ahead of the first matching call,
    to simulate a concurrent writer changing rows between two round-trips.
    """

    def __init__(self):
        super().__init__()
        self._plan = {}
        self._calls = Counter()
        self._hooks = {}

    def fail_on(self, operation: str, model, nth: int = 1) -> "FailingStore":
        self._plan[(operation, model)] = nth
        return self

    def before(self, operation: str, model, action) -> "FailingStore":
        self._hooks[(operation, model)] = action
        return self

    def _maybe_fail(self, operation: str, model) -> None:
        key = (operation, model)
        hook = self._hooks.pop(key, None)
        if hook is not None:
            hook()
        if key not in self._plan:
            return
        self._calls[key] += 1
        if self._calls[key] == self._plan[key]:
            raise StoreError(f"injected {operation} failure on {model.__tablename__}")

    def insert(self, model, rows):
        self._maybe_fail("insert", model)
        return super().insert(model, rows)

    def update(self, model, patch, *criteria, **filters):
        self._maybe_fail("update", model)
        return super().update(model, patch, *criteria, **filters)

    def delete(self, model, *criteria, **filters):
        self._maybe_fail("delete", model)
        return super().delete(model, *criteria, **filters)


@pytest.fixture(scope='function')
def failing_store(db_session):
    return FailingStore()
