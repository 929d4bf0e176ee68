from decimal import Decimal

import pytest

from printdesk.errors import InsufficientStockError, NotFoundError, ValidationError
from printdesk.extensions import db
from printdesk.models import InventoryItem
from printdesk.services import stock_ledger

from conftest import stock_of


def test_reserve_returns_price_and_name_without_writing(inventory):
    reservation = stock_ledger.reserve("I00001", 2)

    assert reservation.item_name == "Black Ink Cartridge XL"
    assert reservation.unit_price == Decimal("150000")
    assert reservation.line_total == Decimal("300000")
    assert stock_of("I00001") == 50


def test_reserve_unknown_item(inventory):
    with pytest.raises(NotFoundError):
        stock_ledger.reserve("I00099", 1)


def test_reserve_more_than_stock_reports_item(inventory):
    with pytest.raises(InsufficientStockError) as excinfo:
        stock_ledger.reserve("I00001", 60)

    err = excinfo.value
    assert err.details == {
        "item_id": "I00001",
        "item_name": "Black Ink Cartridge XL",
        "available": 50,
        "requested": 60,
    }
    assert "Available: 50, Requested: 60" in str(err)
    assert stock_of("I00001") == 50


def test_reserve_exact_stock_is_allowed(inventory):
    assert stock_ledger.reserve("I00001", 50).quantity == 50


@pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
def test_reserve_rejects_non_positive_quantity(inventory, quantity):
    with pytest.raises(ValidationError):
        stock_ledger.reserve("I00001", quantity)


def test_commit_decrement_reduces_stock(inventory):
    assert stock_ledger.commit_decrement("I00001", 2) == 48
    assert stock_of("I00001") == 48


def test_commit_decrement_never_goes_negative(inventory):
    with pytest.raises(InsufficientStockError) as excinfo:
        stock_ledger.commit_decrement("I00001", 51)

    assert excinfo.value.available == 50
    assert stock_of("I00001") == 50


def test_commit_decrement_missing_item(inventory):
    with pytest.raises(NotFoundError):
        stock_ledger.commit_decrement("I00099", 1)


def test_restore_increments_stock(inventory):
    assert stock_ledger.restore("I00001", 3) is True
    assert stock_of("I00001") == 53


def test_restore_skips_missing_item(inventory):
    assert stock_ledger.restore("I00099", 3) is False


def test_stock_report_orders_by_stock_desc(inventory):
    db.session.add(InventoryItem(id="I00004", name="USB Printer Cable (2m)", stock=30, unit_price=Decimal("25000")))
    db.session.commit()

    report = stock_ledger.stock_report()

    assert [item.id for item in report] == ["I00003", "I00001", "I00004"]
