from __future__ import annotations

from ..extensions import db
from printdesk.time_utils import to_utc_z, utcnow


class Membership(db.Model):
    """
    Loyalty membership for a customer.

    WHY: Members either redeem their points against a purchase or, once the
    balance is spent, earn new points from it.

    A membership is ACTIVE while expires_on >= today. One per customer.
    Only membership_service writes `points`.
    """
    __tablename__ = "memberships"
    __table_args__ = (
        db.UniqueConstraint("customer_id", name="uq_memberships_customer"),
        db.CheckConstraint("points >= 0", name="ck_memberships_points_non_negative"),
        db.Index("ix_memberships_customer_expires", "customer_id", "expires_on"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.String(6), db.ForeignKey("customers.id"), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    expires_on = db.Column(db.Date, nullable=False)
    points = db.Column(db.Integer, nullable=False, default=0)

    customer = db.relationship("Customer", backref=db.backref("membership", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "created_at": to_utc_z(self.created_at),
            "expires_on": self.expires_on.isoformat(),
            "points": self.points,
        }
