from __future__ import annotations

from flask import Blueprint, jsonify, request

from db import get_db
from errors import NotFoundError
from services.serializers import serialize_doc
from services.table_state import apply_table_state
from services.validation import normalize_phone, require_text

user_data_bp = Blueprint("user_data", __name__, url_prefix="/api")

USERS = "UserData"


def _payload():
    data = request.get_json(silent=True) or {}
    if not data:
        data = request.args.to_dict()
    return data


@user_data_bp.route("/userDataHandler", methods=["GET"])
def list_users():
    rows = [serialize_doc(d) for d in get_db()[USERS].find({})]
    return jsonify(apply_table_state(
        rows, request.args,
        search_fields=("name", "phoneNumber"),
    ))


@user_data_bp.route("/userDataHandler", methods=["PUT"])
def rename_user():
    data = _payload()
    phone = normalize_phone(data.get("phoneNumber"))
    new_name = require_text(data.get("newName"), "Name")
    res = get_db()[USERS].update_one({"phoneNumber": phone}, {"$set": {"name": new_name}})
    if res.matched_count == 0:
        raise NotFoundError("User not found")
    return jsonify(message="User updated successfully")


@user_data_bp.route("/userDataHandler", methods=["DELETE"])
def delete_user():
    data = _payload()
    phone = normalize_phone(data.get("phoneNumber"))
    res = get_db()[USERS].delete_one({"phoneNumber": phone})
    if res.deleted_count == 0:
        raise NotFoundError("User not found")
    return jsonify(message="User deleted successfully")


@user_data_bp.route("/usercount", methods=["GET"])
def user_count():
    return jsonify(count=get_db()[USERS].count_documents({}))
