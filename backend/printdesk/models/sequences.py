from __future__ import annotations

from ..extensions import db
from printdesk.time_utils import utcnow


class IdentifierSequence(db.Model):
    """
    Atomic per-prefix identifier sequences.

    WHY: Prevent race conditions when generating C/S/P/I/T identifiers
    (read-max-then-increment loses updates under concurrent posting).
    """
    __tablename__ = "identifier_sequences"

    prefix = db.Column(db.String(1), primary_key=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
