# Overview: Service-layer operations for identifier sequences.

"""
Identifier Sequence Service - atomic C/S/P/I/T identifiers

WHY: Reading the highest identifier and adding one loses updates when two
postings race. The counter row is incremented with a single UPDATE, so each
caller gets a distinct number.

FORMAT: one letter prefix + five-digit zero-padded number (T00001).

SEEDING: The first allocation for a prefix starts after the highest
identifier already present in the owning table, so existing data keeps its
numbering.
"""

from __future__ import annotations

import re

from sqlalchemy.exc import IntegrityError

from ..errors import StoreError
from ..models import Customer, IdentifierSequence, InventoryItem, Printer, Staff, Transaction
from .store import default_store


IDENTIFIER_WIDTH = 5
MAX_IDENTIFIER_NUMBER = 10 ** IDENTIFIER_WIDTH - 1

IDENTIFIER_MODELS = {
    "C": Customer,
    "S": Staff,
    "P": Printer,
    "I": InventoryItem,
    "T": Transaction,
}


def format_identifier(prefix: str, number: int) -> str:
    return f"{prefix}{number:0{IDENTIFIER_WIDTH}d}"


def is_identifier(value, prefix: str) -> bool:
    """True when value is `prefix` followed by exactly five digits."""
    if not isinstance(value, str):
        return False
    return re.fullmatch(rf"{re.escape(prefix)}\d{{{IDENTIFIER_WIDTH}}}", value) is not None


def _highest_existing_number(prefix: str, store) -> int:
    """Numeric part of the highest well-formed identifier; malformed ids are skipped."""
    model = IDENTIFIER_MODELS[prefix]
    rows, _ = store.select_many(
        model,
        model.id.like(prefix + "_" * IDENTIFIER_WIDTH),
        order_by=model.id.desc(),
    )
    for row in rows:
        if is_identifier(row.id, prefix):
            return int(row.id[1:])
    return 0


def _increment(prefix: str, store) -> int | None:
    rows = store.update(
        IdentifierSequence,
        {"next_number": IdentifierSequence.next_number + 1},
        prefix=prefix,
    )
    if not rows:
        return None
    return rows[0].next_number - 1


def next_identifier(prefix: str, *, store=None) -> str:
    """
    Atomically allocate the next identifier for a prefix.

    Numbers are never handed out twice; a posting that fails after
    allocation leaves a gap.
    """
    store = store or default_store
    if prefix not in IDENTIFIER_MODELS:
        raise ValueError(f"unknown identifier prefix {prefix!r}")

    number = _increment(prefix, store)
    if number is None:
        number = _highest_existing_number(prefix, store) + 1
        try:
            store.insert(IdentifierSequence, {"prefix": prefix, "next_number": number + 1})
        except StoreError as exc:
            # Another caller created the row first; take the next number from it.
            if not isinstance(exc.__cause__, IntegrityError):
                raise
            number = _increment(prefix, store)
            if number is None:
                raise

    if number > MAX_IDENTIFIER_NUMBER:
        raise StoreError(
            f"Identifier space for prefix {prefix} is exhausted",
            details={"prefix": prefix, "max": format_identifier(prefix, MAX_IDENTIFIER_NUMBER)},
        )
    return format_identifier(prefix, number)
