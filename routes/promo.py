from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from flask import Blueprint, jsonify, request

from db import get_db
from errors import ConflictError, NotFoundError, ValidationError
from services.serializers import serialize_doc, to_object_id
from services.table_state import apply_table_state
from services.validation import parse_amount, require_text

logger = logging.getLogger(__name__)

promo_bp = Blueprint("promo", __name__, url_prefix="/api")

PROMO_CODES = "PromoCodes"


def validated_promo(data: Dict[str, Any]) -> Dict[str, Any]:
    """Promo payload as stored: code trimmed and uppercased, percentage > 0."""
    code = require_text(data.get("code"), "Code").upper()
    percentage = parse_amount(data.get("percentage"), "Percentage")
    if percentage <= 0:
        raise ValidationError("Percentage must be greater than 0")
    return {"code": code, "percentage": percentage}


def _ensure_unique(col, code: str, exclude_id: Optional[ObjectId] = None) -> None:
    query: Dict[str, Any] = {"code": code}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if col.find_one(query, {"_id": 1}):
        raise ConflictError(f"Promo code {code} already exists")


def _id_arg() -> ObjectId:
    raw = request.args.get("id")
    if not raw:
        raise ValidationError("ID is required")
    return to_object_id(raw)


@promo_bp.route("/promo", methods=["GET"])
def list_promos():
    rows = [serialize_doc(d) for d in get_db()[PROMO_CODES].find({})]
    return jsonify(apply_table_state(rows, request.args, search_fields=("code",)))


@promo_bp.route("/promo", methods=["POST"])
def create_promo():
    promo = validated_promo(request.get_json(silent=True) or {})
    col = get_db()[PROMO_CODES]
    _ensure_unique(col, promo["code"])
    res = col.insert_one(dict(promo))
    logger.info("Created promo code %s (%s%%)", promo["code"], promo["percentage"])
    return jsonify({"id": str(res.inserted_id), **promo}), 201


@promo_bp.route("/promo", methods=["PUT"])
def update_promo():
    oid = _id_arg()
    promo = validated_promo(request.get_json(silent=True) or {})
    col = get_db()[PROMO_CODES]
    _ensure_unique(col, promo["code"], exclude_id=oid)
    res = col.update_one({"_id": oid}, {"$set": promo})
    if res.matched_count == 0:
        raise NotFoundError("Promo code not found")
    return jsonify({"id": str(oid), **promo, "modified": res.modified_count})


@promo_bp.route("/promo", methods=["DELETE"])
def delete_promo():
    oid = _id_arg()
    res = get_db()[PROMO_CODES].delete_one({"_id": oid})
    if res.deleted_count == 0:
        raise NotFoundError("Promo code not found")
    logger.info("Deleted promo code %s", oid)
    return jsonify({"id": str(oid), "deleted": True})
