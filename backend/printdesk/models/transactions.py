from __future__ import annotations

from ..extensions import db
from printdesk.time_utils import to_utc_z, utcnow


class Transaction(db.Model):
    """
    Sale transaction (identifier format T#####).

    total_price is the post-benefit amount: membership redemption is applied
    once, before the row is inserted, and never recomputed afterward.

    A transaction is created together with its association rows and deleted
    only as a full unit through transaction_service.reverse_transaction.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("total_price >= 0", name="ck_transactions_total_non_negative"),
        db.CheckConstraint("paper_count >= 0", name="ck_transactions_paper_count_non_negative"),
        db.Index("ix_transactions_customer_occurred", "customer_id", "occurred_at"),
    )

    id = db.Column(db.String(6), primary_key=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)
    payment_method = db.Column(db.String(10), nullable=True)
    customer_id = db.Column(db.String(6), db.ForeignKey("customers.id"), nullable=False)

    # Printed papers billed on printer service (0 when no printer was used)
    paper_count = db.Column(db.Integer, nullable=False, default=0)

    customer = db.relationship("Customer", backref=db.backref("transactions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "occurred_at": to_utc_z(self.occurred_at),
            "total_price": str(self.total_price),
            "payment_method": self.payment_method,
            "customer_id": self.customer_id,
            "paper_count": self.paper_count,
        }

    def to_detail_dict(self) -> dict:
        """Transaction with customer, staff, printers and purchased items nested."""
        data = self.to_dict()
        data["customer"] = {"name": self.customer.name} if self.customer else None
        data["staff"] = [
            {"id": a.staff_id, "name": a.staff.name if a.staff else None}
            for a in self.staff_assignments
        ]
        data["printers"] = [a.printer_id for a in self.printer_assignments]
        data["items"] = [line.to_dict() for line in self.inventory_lines]
        return data


class TransactionInventoryLine(db.Model):
    """Purchased quantity of one inventory item on a transaction."""
    __tablename__ = "transaction_inventory"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_transaction_inventory_quantity_positive"),
    )

    transaction_id = db.Column(db.String(6), db.ForeignKey("transactions.id"), primary_key=True)
    item_id = db.Column(db.String(6), db.ForeignKey("inventory_items.id"), primary_key=True)
    quantity = db.Column(db.Integer, nullable=False)

    transaction = db.relationship("Transaction", backref=db.backref("inventory_lines", lazy=True))
    item = db.relationship("InventoryItem")

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "item_name": self.item.name if self.item else None,
            "unit_price": str(self.item.unit_price) if self.item else None,
        }


class StaffAssignment(db.Model):
    """Staff member who handled a transaction."""
    __tablename__ = "staff_transactions"

    staff_id = db.Column(db.String(6), db.ForeignKey("staff.id"), primary_key=True)
    transaction_id = db.Column(db.String(6), db.ForeignKey("transactions.id"), primary_key=True)

    staff = db.relationship("Staff")
    transaction = db.relationship("Transaction", backref=db.backref("staff_assignments", lazy=True))


class PrinterAssignment(db.Model):
    """Printer used for the service part of a transaction."""
    __tablename__ = "printer_transactions"

    printer_id = db.Column(db.String(6), db.ForeignKey("printers.id"), primary_key=True)
    transaction_id = db.Column(db.String(6), db.ForeignKey("transactions.id"), primary_key=True)

    printer = db.relationship("Printer")
    transaction = db.relationship("Transaction", backref=db.backref("printer_assignments", lazy=True))
