from decimal import Decimal

import pytest
from sqlalchemy import insert

from printdesk.errors import StoreError
from printdesk.extensions import db
from printdesk.models import IdentifierSequence, Transaction
from printdesk.services import sequence_service


def test_first_identifier_when_table_is_empty(db_session):
    assert sequence_service.next_identifier("T") == "T00001"
    assert sequence_service.next_identifier("T") == "T00002"


def test_sequence_starts_after_existing_identifiers(directory, db_session):
    db_session.add(Transaction(id="T00041", customer_id="C00001", total_price=Decimal("0"), payment_method="Cash"))
    db_session.commit()

    assert sequence_service.next_identifier("T") == "T00042"


def test_malformed_identifiers_do_not_reset_sequence(directory, db_session):
    db_session.add_all([
        Transaction(id="T00041", customer_id="C00001", total_price=Decimal("0"), payment_method="Cash"),
        Transaction(id="TEMP01", customer_id="C00001", total_price=Decimal("0"), payment_method="Cash"),
    ])
    db_session.commit()

    assert sequence_service.next_identifier("T") == "T00042"


def test_concurrent_seed_continues_from_winning_row(db_session, failing_store):
    def seed_from_another_caller():
        db.session.execute(insert(IdentifierSequence).values(prefix="T", next_number=8))
        db.session.commit()

    failing_store.before("insert", IdentifierSequence, seed_from_another_caller)

    assert sequence_service.next_identifier("T", store=failing_store) == "T00008"
    assert sequence_service.next_identifier("T", store=failing_store) == "T00009"
    assert db_session.query(IdentifierSequence).count() == 1


def test_prefixes_are_independent(db_session):
    assert sequence_service.next_identifier("T") == "T00001"
    assert sequence_service.next_identifier("C") == "C00001"
    assert sequence_service.next_identifier("T") == "T00002"


def test_exhausted_sequence(db_session):
    db_session.add(IdentifierSequence(prefix="T", next_number=100000))
    db_session.commit()

    with pytest.raises(StoreError):
        sequence_service.next_identifier("T")


def test_unknown_prefix(db_session):
    with pytest.raises(ValueError):
        sequence_service.next_identifier("X")


@pytest.mark.parametrize("value, prefix, expected", [
    ("T00001", "T", True),
    ("C12345", "C", True),
    ("T0001", "T", False),
    ("T000001", "T", False),
    ("C00001", "T", False),
    ("t00001", "T", False),
    (None, "T", False),
])
def test_is_identifier(value, prefix, expected):
    assert sequence_service.is_identifier(value, prefix) is expected
