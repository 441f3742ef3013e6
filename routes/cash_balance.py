from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from branches import find_branch
from db import get_db
from errors import NotFoundError, ValidationError
from services.cash_balance import CASH_ENTRIES, all_counter_balances, build_cash_entry
from services.serializers import serialize_doc, to_object_id
from services.table_state import apply_table_state
from services.validation import parse_amount

logger = logging.getLogger(__name__)

cash_balance_bp = Blueprint("cash_balance", __name__, url_prefix="/api")


@cash_balance_bp.route("/fetchCashBalance", methods=["GET"])
def fetch_cash_balance():
    """All-time counter balance per branch."""
    return jsonify(all_counter_balances(get_db()))


@cash_balance_bp.route("/fetchCashEntries", methods=["GET"])
def fetch_cash_entries():
    query = {}
    location = (request.args.get("location") or "").strip()
    if location and location.lower() not in ("all", "all branches"):
        branch = find_branch(location)
        if branch is None:
            raise ValidationError(f"Unknown location: {location}")
        query["location"] = branch.display_name

    rows = [serialize_doc(d) for d in get_db()[CASH_ENTRIES].find(query).sort("createdAt", -1)]
    return jsonify(apply_table_state(rows, request.args, search_fields=("location", "status")))


@cash_balance_bp.route("/cashEntries", methods=["POST"])
def create_cash_entry():
    """Record a drawer count and how it compares with the expected balance."""
    data = request.get_json(silent=True) or {}
    branch = find_branch(data.get("location"))
    if branch is None:
        raise ValidationError("A valid location is required")
    amount = parse_amount(data.get("amountEntered"), "amountEntered")
    if amount < 0:
        raise ValidationError("amountEntered cannot be negative")

    db = get_db()
    entry = build_cash_entry(db, branch, amount)
    res = db[CASH_ENTRIES].insert_one(entry)
    logger.info(
        "Cash count at %s: entered %.2f, expected %.2f (%s)",
        branch.display_name, amount, entry["actualAmount"], entry["status"],
    )
    return jsonify(serialize_doc({**entry, "_id": res.inserted_id})), 201


@cash_balance_bp.route("/cashEntries", methods=["DELETE"])
def delete_cash_entry():
    raw = request.args.get("id")
    if not raw:
        raise ValidationError("ID is required")
    oid = to_object_id(raw)
    res = get_db()[CASH_ENTRIES].delete_one({"_id": oid})
    if res.deleted_count == 0:
        raise NotFoundError("Cash entry not found")
    return jsonify({"id": str(oid), "deleted": True})
