from __future__ import annotations

from ..extensions import db


class InventoryItem(db.Model):
    """
    Sellable stock item (identifier format I#####).

    INVARIANT: stock never goes negative. The check constraint is the last
    line of defense; stock_ledger pre-checks and decrements conditionally.

    Only stock_ledger writes `stock`.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_inventory_items_stock_non_negative"),
        db.CheckConstraint("unit_price >= 0", name="ck_inventory_items_price_non_negative"),
        db.Index("ix_inventory_items_stock", "stock"),
    )

    id = db.Column(db.String(6), primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "stock": self.stock,
            "unit_price": str(self.unit_price),
        }
