# Overview: Membership benefit calculation; the only writer of Membership.points.

"""
Membership Benefit Calculator

Rules, applied once per posting to the candidate (pre-benefit) total:
- No active membership (expires_on >= today): total unchanged, nothing written.
- points > 0: redeem min(points, floor(total)) points, one point per currency
  unit. The total can reach zero but never goes negative.
- points == 0: earn floor(total / 10) points; total unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_FLOOR

from flask import current_app

from ..errors import NotFoundError, StoreError, ValidationError
from ..models import Membership
from printdesk.time_utils import today
from .store import default_store


POINTS_EARN_DIVISOR = 10


@dataclass(frozen=True)
class BenefitOutcome:
    customer_id: str
    candidate_total: Decimal
    adjusted_total: Decimal
    membership_id: int | None = None
    points_redeemed: int = 0
    points_earned: int = 0

    @property
    def points_changed(self) -> bool:
        return bool(self.points_redeemed or self.points_earned)

    def to_dict(self) -> dict:
        return {
            "membership_id": self.membership_id,
            "candidate_total": str(self.candidate_total),
            "adjusted_total": str(self.adjusted_total),
            "points_redeemed": self.points_redeemed,
            "points_earned": self.points_earned,
        }


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def get_active_membership(customer_id: str, as_of: date | None = None, *, store=None) -> Membership | None:
    store = store or default_store
    as_of = as_of or today()
    return store.select_one(Membership, Membership.expires_on >= as_of, customer_id=customer_id)


def apply_benefit(
    customer_id: str,
    candidate_total: Decimal,
    *,
    as_of: date | None = None,
    store=None,
) -> BenefitOutcome:
    """Redeem or accrue points for one posting and return the adjusted total."""
    store = store or default_store
    candidate_total = Decimal(candidate_total)
    if candidate_total < 0:
        raise ValidationError("candidate total cannot be negative", details={"candidate_total": str(candidate_total)})

    membership = get_active_membership(customer_id, as_of, store=store)
    if membership is None:
        current_app.logger.info(
            "No active membership for customer %s; total %s unchanged", customer_id, candidate_total
        )
        return BenefitOutcome(customer_id, candidate_total, candidate_total)

    membership_id = membership.id
    points = membership.points

    if points > 0:
        points_to_use = min(points, _floor(candidate_total))
        if points_to_use > 0:
            rows = store.update(
                Membership,
                {"points": Membership.points - points_to_use},
                Membership.points >= points_to_use,
                id=membership_id,
            )
            if not rows:
                raise StoreError(
                    f"Membership points for customer {customer_id} changed during posting",
                    details={"membership_id": membership_id, "points_to_use": points_to_use},
                )
        adjusted_total = candidate_total - points_to_use
        current_app.logger.info(
            "Customer %s redeemed %d of %d points; total %s -> %s",
            customer_id, points_to_use, points, candidate_total, adjusted_total,
        )
        return BenefitOutcome(
            customer_id, candidate_total, adjusted_total,
            membership_id=membership_id, points_redeemed=points_to_use,
        )

    points_earned = _floor(candidate_total / POINTS_EARN_DIVISOR)
    if points_earned > 0:
        store.update(Membership, {"points": Membership.points + points_earned}, id=membership_id)
        current_app.logger.info("Customer %s earned %d points", customer_id, points_earned)
    else:
        current_app.logger.debug("Total %s too low to earn points for customer %s", candidate_total, customer_id)

    return BenefitOutcome(
        customer_id, candidate_total, candidate_total,
        membership_id=membership_id, points_earned=points_earned,
    )


def reverse_benefit(outcome: BenefitOutcome, *, store=None) -> None:
    """Undo the points delta of `outcome`. Used to compensate a failed posting."""
    store = store or default_store
    if outcome.membership_id is None or not outcome.points_changed:
        return

    if outcome.points_redeemed:
        rows = store.update(
            Membership,
            {"points": Membership.points + outcome.points_redeemed},
            id=outcome.membership_id,
        )
    else:
        rows = store.update(
            Membership,
            {"points": Membership.points - outcome.points_earned},
            Membership.points >= outcome.points_earned,
            id=outcome.membership_id,
        )

    if not rows:
        raise NotFoundError(
            f"Membership {outcome.membership_id} could not be restored",
            details={"membership_id": outcome.membership_id},
        )
    current_app.logger.warning(
        "Reversed points for customer %s: +%d redeemed, -%d earned",
        outcome.customer_id, outcome.points_redeemed, outcome.points_earned,
    )
