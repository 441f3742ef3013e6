from __future__ import annotations

from typing import Any, Dict, List

from flask import Blueprint, jsonify, request

from branches import resolve_branches
from db import get_db
from expense_categories import expense_category_filter
from report_policies import BOOKINGS_WINDOW, EXPENSES_WINDOW, ORDERS_WINDOW
from services.aggregation import as_float, is_number, order_revenue
from services.date_windows import normalize_window
from services.serializers import serialize_doc
from services.table_state import apply_table_state

records_bp = Blueprint("records", __name__, url_prefix="/api")

ORDER_LIST_FIELDS = {
    "customerName": 1,
    "phoneNumber": 1,
    "total": 1,
    "tableDeliveryCharge": 1,
    "createdAt": 1,
    "status": 1,
    "items": 1,
}


def _payload() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


@records_bp.route("/orders", methods=["POST"])
def orders():
    """Orders in range; `total` is net of the table delivery charge."""
    data = _payload()
    window = normalize_window(data.get("startDate"), data.get("endDate"), ORDERS_WINDOW)
    db = get_db()

    rows: List[Dict[str, Any]] = []
    for branch in resolve_branches(data.get("branch")):
        cursor = db[branch.orders].find({"createdAt": window.mongo_range()}, ORDER_LIST_FIELDS)
        for doc in cursor:
            if is_number(doc.get("total")):
                doc["total"] = order_revenue(doc)
            doc.pop("tableDeliveryCharge", None)
            doc["branch"] = branch.name
            rows.append(serialize_doc(doc))

    return jsonify(apply_table_state(
        rows, request.args,
        search_fields=("customerName", "phoneNumber", "status"),
    ))


@records_bp.route("/bookings", methods=["POST"])
def bookings():
    data = _payload()
    window = normalize_window(data.get("startDate"), data.get("endDate"), BOOKINGS_WINDOW)
    db = get_db()

    rows: List[Dict[str, Any]] = []
    for branch in resolve_branches(data.get("branch")):
        for doc in db[branch.bookings].find({"createdAt": window.mongo_range()}):
            doc["branch"] = branch.name
            rows.append(serialize_doc(doc))

    return jsonify({
        "totalBookings": len(rows),
        "promoCodeUsage": sum(1 for r in rows if r.get("promoCode")),
        "bookings": apply_table_state(
            rows, request.args,
            search_fields=("customerName", "phoneNumber", "promoCode"),
        ),
    })


@records_bp.route("/expenses", methods=["POST"])
def expenses():
    """
    Expense rows for the table. `category` may be a concrete category or one of
    the grouped views; blank means "General Expenses".
    """
    data = _payload()
    window = normalize_window(data.get("startDate"), data.get("endDate"), EXPENSES_WINDOW)
    query = {"createdAt": window.mongo_range(), **expense_category_filter(data.get("category"))}
    db = get_db()

    rows: List[Dict[str, Any]] = []
    total = 0.0
    for branch in resolve_branches(data.get("branch")):
        for doc in db[branch.expenses].find(query):
            doc["branch"] = branch.name
            total += as_float(doc.get("amount"))
            rows.append(serialize_doc(doc))

    return jsonify({
        "expenses": apply_table_state(
            rows, request.args,
            search_fields=("category", "comment", "branch"),
        ),
        "total": round(total, 2),
    })
