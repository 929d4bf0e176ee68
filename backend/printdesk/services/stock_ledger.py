# Overview: Service-layer operations for inventory stock; the only writer of InventoryItem.stock.

"""
Stock Ledger

Inventory invariants (authoritative):
- stock is never negative. reserve() pre-checks, commit_decrement() writes
  `stock = stock - q WHERE stock >= q` and rejects the write when no row was
  affected, and the table check constraint backs both.
- A posting reserves every line before any row is written and commits
  decrements only after all its other rows exist.
- restore() never blocks deletion of a transaction: a missing item is logged
  and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from flask import current_app

from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..models import InventoryItem
from .store import default_store


@dataclass(frozen=True)
class Reservation:
    """Result of a successful availability check for one line."""
    item_id: str
    item_name: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("quantity must be a positive integer", details={"quantity": quantity})


def reserve(item_id: str, quantity: int, *, store=None) -> Reservation:
    """Check that `quantity` of the item is available. Writes nothing."""
    store = store or default_store
    _check_quantity(quantity)

    item = store.select_one(InventoryItem, id=item_id)
    if item is None:
        raise NotFoundError(f"Inventory item {item_id} not found", details={"item_id": item_id})

    if quantity > item.stock:
        raise InsufficientStockError(item.id, item.name, item.stock, quantity)

    return Reservation(
        item_id=item.id,
        item_name=item.name,
        unit_price=Decimal(item.unit_price),
        quantity=quantity,
    )


def commit_decrement(item_id: str, quantity: int, *, store=None) -> int:
    """
    Persist `stock -= quantity` if enough stock remains. Returns the new stock.

    Raises InsufficientStockError when a concurrent sale drained the item
    since it was reserved.
    """
    store = store or default_store
    _check_quantity(quantity)

    rows = store.update(
        InventoryItem,
        {"stock": InventoryItem.stock - quantity},
        InventoryItem.stock >= quantity,
        id=item_id,
    )
    if not rows:
        item = store.select_one(InventoryItem, id=item_id)
        if item is None:
            raise NotFoundError(f"Inventory item {item_id} not found", details={"item_id": item_id})
        raise InsufficientStockError(item.id, item.name, item.stock, quantity)

    new_stock = rows[0].stock
    current_app.logger.info("Stock of %s reduced by %d to %d", item_id, quantity, new_stock)
    return new_stock


def restore(item_id: str, quantity: int, *, store=None) -> bool:
    """
    Persist `stock += quantity`. Returns False if the item no longer exists.

    StoreError from the underlying write propagates; callers decide whether
    it is fatal.
    """
    store = store or default_store
    _check_quantity(quantity)

    rows = store.update(
        InventoryItem,
        {"stock": InventoryItem.stock + quantity},
        id=item_id,
    )
    if not rows:
        current_app.logger.warning(
            "Skipping stock restore for item %s (quantity %d): item not found", item_id, quantity
        )
        return False

    current_app.logger.info("Stock of %s restored by %d to %d", item_id, quantity, rows[0].stock)
    return True


def stock_report(*, store=None) -> list[InventoryItem]:
    """All inventory items, highest stock first."""
    store = store or default_store
    rows, _ = store.select_many(
        InventoryItem,
        order_by=(InventoryItem.stock.desc(), InventoryItem.name),
    )
    return rows
