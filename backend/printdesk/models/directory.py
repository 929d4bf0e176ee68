from __future__ import annotations

from ..extensions import db


class Customer(db.Model):
    """Walk-in or registered customer (identifier format C#####)."""
    __tablename__ = "customers"

    id = db.Column(db.String(6), primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    phone = db.Column(db.String(15), nullable=True)


class Staff(db.Model):
    """Staff member who handles transactions (identifier format S#####)."""
    __tablename__ = "staff"
    __table_args__ = (
        db.CheckConstraint("gender IS NULL OR gender IN ('M', 'F', 'O')", name="ck_staff_gender"),
    )

    id = db.Column(db.String(6), primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    phone = db.Column(db.String(15), nullable=True)
    address = db.Column(db.String(100), nullable=True)
    gender = db.Column(db.String(1), nullable=True)


class Printer(db.Model):
    """
    Shop printer used for paid printing service (identifier format P#####).

    is_operational=False means the printer is waiting on maintenance.
    """
    __tablename__ = "printers"

    id = db.Column(db.String(6), primary_key=True)
    is_operational = db.Column(db.Boolean, nullable=False, default=True)
    condition = db.Column(db.String(100), nullable=True)
