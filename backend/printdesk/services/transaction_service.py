# Overview: Transaction posting and reversal; orchestrates stock, membership and association writes.

"""
Transaction Service - posting pipeline and its inverse

POSTING ORDER (each step is a committed store round-trip):
1. validate request, resolve customer/staff/printer
2. reserve every inventory line (no writes; fails fast)
3. candidate total = inventory lines + paper_count * PRINTER_PAPER_RATE
4. allocate T##### from the identifier sequence
5. apply membership benefit (redeem or earn points) -> final total
6. insert transaction row with the final total
7. insert staff link, printer link, inventory lines
8. commit stock decrements

From step 5 on, every committed write pushes its inverse onto a
CompensationLog. A failure unwinds the log newest first, so points, rows and
stock return to their pre-posting values.

REVERSAL restores stock line by line, then removes links and the
transaction row. A line is claimed by deleting it before its stock is
restored, so two concurrent reversals cannot restore the same line twice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from functools import partial

from flask import current_app

from ..errors import NotFoundError, PartialFailureError, StoreError, ValidationError
from ..models import (
    Customer,
    Printer,
    PrinterAssignment,
    Staff,
    StaffAssignment,
    Transaction,
    TransactionInventoryLine,
)
from . import membership_service, sequence_service, stock_ledger
from .compensation import CompensationLog
from .membership_service import BenefitOutcome
from .store import default_store


DEFAULT_PAPER_RATE = Decimal("500")
MAX_PAYMENT_METHOD_LENGTH = 10
MAX_PAGE_SIZE = 100

# Column limits: INTEGER counts, Numeric(10, 2) totals
MAX_COUNT = 2 ** 31 - 1
MAX_TOTAL = Decimal("99999999.99")

ORDERABLE_COLUMNS = {
    "occurred_at": Transaction.occurred_at,
    "id": Transaction.id,
    "total_price": Transaction.total_price,
    "payment_method": Transaction.payment_method,
    "customer_id": Transaction.customer_id,
}


@dataclass(frozen=True)
class PostingLine:
    item_id: str
    quantity: int


@dataclass(frozen=True)
class PostingRequest:
    customer_id: str
    staff_id: str
    payment_method: str
    items: tuple[PostingLine, ...] = ()
    printer_id: str | None = None
    paper_count: int = 0


@dataclass(frozen=True)
class PostingResult:
    transaction_id: str
    final_total: Decimal
    candidate_total: Decimal
    benefit: BenefitOutcome

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "final_total": str(self.final_total),
            "candidate_total": str(self.candidate_total),
            "benefit": self.benefit.to_dict(),
        }


@dataclass(frozen=True)
class ReversalResult:
    transaction_id: str
    restored: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)


# =============================================================================
# Request parsing & validation
# =============================================================================

def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_COUNT


def _is_payment_method(value) -> bool:
    return isinstance(value, str) and 0 < len(value.strip()) <= MAX_PAYMENT_METHOD_LENGTH


def parse_posting_request(payload: dict | None) -> PostingRequest:
    """Build a PostingRequest from a JSON body. Shape errors raise ValidationError."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    raw_items = payload.get("items") or []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError("Each item needs item_id and a positive quantity", details={"index": index})
        items.append(PostingLine(item_id=raw.get("item_id"), quantity=raw.get("quantity")))

    paper_count = payload.get("paper_count")
    return PostingRequest(
        customer_id=payload.get("customer_id"),
        staff_id=payload.get("staff_id"),
        payment_method=payload.get("payment_method"),
        items=tuple(items),
        printer_id=payload.get("printer_id") or None,
        paper_count=0 if paper_count is None else paper_count,
    )


def validate_request(request: PostingRequest) -> None:
    """Structural checks that need no store access."""
    missing = [
        name for name in ("customer_id", "staff_id", "payment_method")
        if not getattr(request, name)
    ]
    if missing:
        raise ValidationError(
            f"Missing required transaction fields: {', '.join(missing)}",
            details={"missing": missing},
        )

    if not sequence_service.is_identifier(request.customer_id, "C"):
        raise ValidationError("customer_id must look like C00001", details={"customer_id": request.customer_id})
    if not sequence_service.is_identifier(request.staff_id, "S"):
        raise ValidationError("staff_id must look like S00001", details={"staff_id": request.staff_id})
    if not _is_payment_method(request.payment_method):
        raise ValidationError(
            f"payment_method must be 1 to {MAX_PAYMENT_METHOD_LENGTH} characters",
            details={"payment_method": request.payment_method},
        )

    for index, line in enumerate(request.items):
        if not sequence_service.is_identifier(line.item_id, "I") or not _is_positive_int(line.quantity):
            raise ValidationError(
                "Invalid inventory items format. Each item needs item_id and a positive quantity.",
                details={"index": index, "item_id": line.item_id, "quantity": line.quantity},
            )

    paper_count = request.paper_count
    if isinstance(paper_count, bool) or not isinstance(paper_count, int) or not 0 <= paper_count <= MAX_COUNT:
        raise ValidationError(
            f"paper_count must be an integer between 0 and {MAX_COUNT}",
            details={"paper_count": paper_count},
        )

    if request.printer_id is not None:
        if not sequence_service.is_identifier(request.printer_id, "P"):
            raise ValidationError("printer_id must look like P00001", details={"printer_id": request.printer_id})
        if paper_count <= 0:
            raise ValidationError(
                "Printer service selected but invalid paper count provided. Must be a positive number.",
                details={"printer_id": request.printer_id, "paper_count": paper_count},
            )
    elif paper_count > 0:
        raise ValidationError("paper_count requires a printer_id", details={"paper_count": paper_count})

    if not request.items and request.printer_id is None:
        raise ValidationError("A transaction needs inventory items or a printer service")


def _merge_lines(items) -> list[PostingLine]:
    """Sum quantities of repeated items, keeping first-seen order."""
    totals: dict[str, int] = {}
    for line in items:
        totals[line.item_id] = totals.get(line.item_id, 0) + line.quantity
    return [PostingLine(item_id, quantity) for item_id, quantity in totals.items()]


def _require(store, model, identifier: str, label: str):
    row = store.select_one(model, id=identifier)
    if row is None:
        raise NotFoundError(f"{label} {identifier} not found", details={"id": identifier})
    return row


def _paper_rate() -> Decimal:
    return Decimal(str(current_app.config.get("PRINTER_PAPER_RATE", DEFAULT_PAPER_RATE)))


def _candidate_total(reservations, paper_count: int) -> Decimal:
    total = sum((r.line_total for r in reservations), Decimal("0"))
    if paper_count > 0:
        total += _paper_rate() * paper_count
    return total


# =============================================================================
# Posting
# =============================================================================

def post_transaction(
    request: PostingRequest,
    *,
    as_of: date | None = None,
    store=None,
) -> PostingResult:
    """
    Create a transaction with its links, membership benefit and stock decrements.

    Raises ValidationError / NotFoundError / InsufficientStockError before any
    write. Later failures are compensated and re-raised; PartialFailureError
    when compensation itself could not complete.
    """
    store = store or default_store
    validate_request(request)
    lines = _merge_lines(request.items)

    _require(store, Customer, request.customer_id, "Customer")
    _require(store, Staff, request.staff_id, "Staff")
    if request.printer_id:
        _require(store, Printer, request.printer_id, "Printer")

    reservations = [stock_ledger.reserve(line.item_id, line.quantity, store=store) for line in lines]
    candidate_total = _candidate_total(reservations, request.paper_count)
    if candidate_total > MAX_TOTAL:
        raise ValidationError(
            f"Transaction total {candidate_total} exceeds the maximum of {MAX_TOTAL}",
            details={"candidate_total": str(candidate_total), "max_total": str(MAX_TOTAL)},
        )

    transaction_id = sequence_service.next_identifier("T", store=store)
    compensation = CompensationLog(f"transaction {transaction_id}")

    try:
        benefit = membership_service.apply_benefit(
            request.customer_id, candidate_total, as_of=as_of, store=store
        )
        if benefit.points_changed:
            compensation.push(
                "restore membership points",
                partial(membership_service.reverse_benefit, benefit, store=store),
            )

        store.insert(Transaction, {
            "id": transaction_id,
            "customer_id": request.customer_id,
            "total_price": benefit.adjusted_total,
            "payment_method": request.payment_method.strip(),
            "paper_count": request.paper_count,
        })
        compensation.push("delete transaction row", partial(store.delete, Transaction, id=transaction_id))

        store.insert(StaffAssignment, {"staff_id": request.staff_id, "transaction_id": transaction_id})
        compensation.push(
            "delete staff link",
            partial(store.delete, StaffAssignment, transaction_id=transaction_id),
        )

        if request.printer_id:
            store.insert(PrinterAssignment, {"printer_id": request.printer_id, "transaction_id": transaction_id})
            compensation.push(
                "delete printer link",
                partial(store.delete, PrinterAssignment, transaction_id=transaction_id),
            )

        if lines:
            store.insert(TransactionInventoryLine, [
                {"transaction_id": transaction_id, "item_id": line.item_id, "quantity": line.quantity}
                for line in lines
            ])
            compensation.push(
                "delete inventory lines",
                partial(store.delete, TransactionInventoryLine, transaction_id=transaction_id),
            )

        for reservation in reservations:
            stock_ledger.commit_decrement(reservation.item_id, reservation.quantity, store=store)
            compensation.push(
                f"restore stock of {reservation.item_id}",
                partial(stock_ledger.restore, reservation.item_id, reservation.quantity, store=store),
            )

    except Exception as exc:
        current_app.logger.warning(
            "Posting %s failed (%s); compensating %d step(s)", transaction_id, exc, len(compensation)
        )
        failures = compensation.unwind()
        if failures:
            raise PartialFailureError(
                f"Transaction {transaction_id} failed and could not be fully rolled back",
                details={
                    "transaction_id": transaction_id,
                    "cause": str(exc),
                    "failed_compensations": failures,
                },
            ) from exc
        raise

    current_app.logger.info(
        "Posted %s for customer %s: candidate %s, final %s",
        transaction_id, request.customer_id, candidate_total, benefit.adjusted_total,
    )
    return PostingResult(
        transaction_id=transaction_id,
        final_total=benefit.adjusted_total,
        candidate_total=candidate_total,
        benefit=benefit,
    )


# =============================================================================
# Reversal
# =============================================================================

def reverse_transaction(transaction_id: str, *, store=None) -> ReversalResult:
    """
    Delete a transaction and restore the stock it consumed.

    Stock restore failures are logged and reported in the result; only the
    final delete of the transaction row decides success.
    """
    store = store or default_store
    if not transaction_id:
        raise ValidationError("Transaction ID is required for deletion")

    if store.select_one(Transaction, id=transaction_id) is None:
        raise NotFoundError(f"Transaction {transaction_id} not found", details={"id": transaction_id})

    rows, _ = store.select_many(
        TransactionInventoryLine,
        order_by=TransactionInventoryLine.item_id,
        transaction_id=transaction_id,
    )
    lines = [(row.item_id, row.quantity) for row in rows]

    restored, failed = [], []
    for item_id, quantity in lines:
        claimed = store.delete(TransactionInventoryLine, transaction_id=transaction_id, item_id=item_id)
        if not claimed:
            continue
        try:
            if stock_ledger.restore(item_id, quantity, store=store):
                restored.append({"item_id": item_id, "quantity": quantity})
            else:
                failed.append({"item_id": item_id, "quantity": quantity, "reason": "item not found"})
        except StoreError as exc:
            current_app.logger.error(
                "Failed to reverse stock for item %s on %s: %s", item_id, transaction_id, exc
            )
            failed.append({"item_id": item_id, "quantity": quantity, "reason": str(exc)})

    store.delete(PrinterAssignment, transaction_id=transaction_id)
    store.delete(StaffAssignment, transaction_id=transaction_id)
    if not store.delete(Transaction, id=transaction_id):
        raise NotFoundError(
            f"Transaction {transaction_id} not found or already deleted",
            details={"id": transaction_id},
        )

    current_app.logger.info(
        "Reversed %s: %d line(s) restored, %d failed", transaction_id, len(restored), len(failed)
    )
    return ReversalResult(transaction_id, restored, failed)


# =============================================================================
# Queries & top-level edits
# =============================================================================

def get_transaction(transaction_id: str, *, store=None) -> Transaction:
    store = store or default_store
    return _require(store, Transaction, transaction_id, "Transaction")


def list_transactions(
    limit: int = 5,
    offset: int = 0,
    order_by: str = "occurred_at",
    descending: bool = True,
    *,
    store=None,
) -> tuple[list[Transaction], int]:
    """Page of transactions and the total count."""
    store = store or default_store
    if order_by not in ORDERABLE_COLUMNS:
        raise ValidationError(
            f"Cannot order by {order_by}",
            details={"allowed": sorted(ORDERABLE_COLUMNS)},
        )
    if not 0 < limit <= MAX_PAGE_SIZE or offset < 0:
        raise ValidationError(
            f"limit must be between 1 and {MAX_PAGE_SIZE} and offset non-negative",
            details={"limit": limit, "offset": offset},
        )

    column = ORDERABLE_COLUMNS[order_by]
    return store.select_many(
        Transaction,
        order_by=(column.desc() if descending else column.asc(), Transaction.id),
        limit=limit,
        offset=offset,
    )


def update_transaction(transaction_id: str, customer_id: str, payment_method: str, *, store=None) -> Transaction:
    """
    Edit top-level details only. Totals, stock and points are never
    recomputed here.
    """
    store = store or default_store
    if not transaction_id or not customer_id or not payment_method:
        raise ValidationError(
            "Missing required fields for transaction update: transaction_id, customer_id, payment_method"
        )
    if not sequence_service.is_identifier(customer_id, "C"):
        raise ValidationError("customer_id must look like C00001", details={"customer_id": customer_id})
    if not _is_payment_method(payment_method):
        raise ValidationError(
            f"payment_method must be 1 to {MAX_PAYMENT_METHOD_LENGTH} characters",
            details={"payment_method": payment_method},
        )

    _require(store, Customer, customer_id, "Customer")
    rows = store.update(
        Transaction,
        {"customer_id": customer_id, "payment_method": payment_method.strip()},
        id=transaction_id,
    )
    if not rows:
        raise NotFoundError(f"Transaction with ID {transaction_id} not found.", details={"id": transaction_id})
    return rows[0]
