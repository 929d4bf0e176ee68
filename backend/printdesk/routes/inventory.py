# Overview: Flask API routes for inventory stock reporting.

from flask import Blueprint, jsonify, current_app

from ..errors import PostingError
from ..services import stock_ledger


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/stock")
def stock_report_route():
    """Inventory items ordered by stock, highest first."""
    try:
        items = stock_ledger.stock_report()
        return jsonify({"items": [item.to_dict() for item in items]}), 200

    except PostingError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to build stock report")
        return jsonify({"error": "Internal server error"}), 500
