# Overview: Flask API routes for transactions; parses input and returns JSON responses.

# backend/printdesk/routes/transactions.py
"""Transaction API routes: posting, listing, editing and reversal."""

from flask import Blueprint, request, jsonify, current_app

from ..errors import PostingError
from ..services import transaction_service


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


def _error_response(e: PostingError):
    return jsonify(e.to_dict()), e.status_code


@transactions_bp.get("/")
def list_transactions_route():
    """
    List transactions with nested customer, staff, printers and items.

    Query: limit (default 5), offset (default 0),
    order_by (default occurred_at), order_direction (asc|desc, default desc)
    """
    try:
        limit = request.args.get("limit", 5, type=int)
        offset = request.args.get("offset", 0, type=int)
        order_by = request.args.get("order_by", "occurred_at")
        descending = request.args.get("order_direction", "desc").lower() == "desc"

        rows, total_count = transaction_service.list_transactions(
            limit=limit, offset=offset, order_by=order_by, descending=descending
        )
        return jsonify({
            "transactions": [t.to_detail_dict() for t in rows],
            "total_count": total_count,
        }), 200

    except PostingError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list transactions")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("/<transaction_id>")
def get_transaction_route(transaction_id: str):
    try:
        transaction = transaction_service.get_transaction(transaction_id)
        return jsonify({"transaction": transaction.to_detail_dict()}), 200

    except PostingError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.post("/")
def post_transaction_route():
    """
    Post a transaction.

    Body: customer_id, staff_id, payment_method,
    items [{item_id, quantity}], optional printer_id + paper_count
    """
    try:
        posting = transaction_service.parse_posting_request(request.get_json(silent=True))
        result = transaction_service.post_transaction(posting)

        return jsonify({
            "message": "Transaction added successfully!",
            **result.to_dict(),
        }), 201

    except PostingError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to post transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.put("/<transaction_id>")
def update_transaction_route(transaction_id: str):
    """Update top-level details (customer, payment method) of a transaction."""
    try:
        data = request.get_json(silent=True) or {}
        transaction = transaction_service.update_transaction(
            transaction_id,
            data.get("customer_id"),
            data.get("payment_method"),
        )
        return jsonify({"transaction": transaction.to_dict()}), 200

    except PostingError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.delete("/<transaction_id>")
def delete_transaction_route(transaction_id: str):
    """Delete a transaction and reverse the inventory stock it consumed."""
    try:
        result = transaction_service.reverse_transaction(transaction_id)

        message = f"Transaction {transaction_id} and its associated records deleted successfully."
        if result.failed:
            message += " Some inventory stock could not be reversed; manual review needed."
        else:
            message += " Inventory stock reversed."

        return jsonify({
            "message": message,
            "restored": result.restored,
            "failed_restores": result.failed,
        }), 200

    except PostingError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete transaction")
        return jsonify({"error": "Internal server error"}), 500
