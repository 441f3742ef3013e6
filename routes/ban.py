from __future__ import annotations

import logging
from datetime import datetime

from flask import Blueprint, jsonify, request
from pymongo.errors import DuplicateKeyError, PyMongoError

from db import get_db
from errors import NotFoundError
from services.serializers import serialize_doc
from services.table_state import apply_table_state
from services.validation import normalize_phone, parse_flag

logger = logging.getLogger(__name__)

ban_bp = Blueprint("ban", __name__, url_prefix="/api")

USERS = "UserData"
UNREGISTERED_USER = "Unregistered User"

BANNED_USER_FIELDS = {"name": 1, "phoneNumber": 1, "banDate": 1, "banHistory": 1, "_id": 0}


def ensure_user_indexes(database) -> None:
    try:
        database[USERS].create_index([("phoneNumber", 1)], unique=True)
        database[USERS].create_index([("banStatus", 1)])
    except PyMongoError as e:
        logger.warning("Could not create UserData indexes: %s", e)


@ban_bp.record_once
def on_load(state):
    with state.app.app_context():
        ensure_user_indexes(get_db())


def ban_user(database, phone: str, reason: str = "") -> bool:
    """
    Ban `phone`, creating an "Unregistered User" record if nobody has that number.
    Banning someone already banned changes nothing. Returns whether anything changed.
    """
    col = database[USERS]
    now = datetime.utcnow()
    entry = {"date": now, "reason": reason}

    if col.find_one({"phoneNumber": phone, "banStatus": True}, {"_id": 1}):
        return False

    # One upsert; the unique phoneNumber index turns a lost race into a no-op.
    try:
        res = col.update_one(
            {"phoneNumber": phone, "banStatus": {"$ne": True}},
            {
                "$set": {"banStatus": True, "banDate": now},
                "$push": {"banHistory": entry},
                "$setOnInsert": {"name": UNREGISTERED_USER, "signupDate": None},
            },
            upsert=True,
        )
    except DuplicateKeyError:
        return False

    if res.upserted_id is not None:
        logger.info("Banned unregistered number %s", phone)
        return True
    if res.modified_count:
        logger.info("Banned %s", phone)
    return bool(res.modified_count)


def unban_user(database, phone: str) -> bool:
    col = database[USERS]
    user = col.find_one({"phoneNumber": phone}, {"banStatus": 1})
    if user is None:
        raise NotFoundError("User not found")
    if user.get("banStatus") is not True:
        return False

    res = col.update_one(
        {"_id": user["_id"], "banStatus": True},
        {"$set": {"banStatus": False}, "$unset": {"banDate": ""}},
    )
    if res.modified_count:
        logger.info("Unbanned %s", phone)
    return bool(res.modified_count)


@ban_bp.route("/checkData", methods=["POST"])
def check_data():
    data = request.get_json(silent=True) or {}
    phone = normalize_phone(data.get("phoneNumber"))
    user = get_db()[USERS].find_one({"phoneNumber": phone})
    if not user:
        return jsonify(found=False)
    return jsonify(found=True, userData=serialize_doc(user))


@ban_bp.route("/updateBanStatus", methods=["POST"])
def update_ban_status():
    data = request.get_json(silent=True) or {}
    phone = normalize_phone(data.get("phoneNumber"))
    new_status = parse_flag(data.get("newBanStatus"), "newBanStatus")
    reason = str(data.get("reason") or "").strip()

    if new_status:
        changed = ban_user(get_db(), phone, reason)
    else:
        changed = unban_user(get_db(), phone)
    return jsonify(success=True, changed=changed)


@ban_bp.route("/getBannedUsers", methods=["GET"])
def get_banned_users():
    rows = [serialize_doc(d) for d in get_db()[USERS].find({"banStatus": True}, BANNED_USER_FIELDS)]
    return jsonify(apply_table_state(
        rows, request.args,
        search_fields=("name", "phoneNumber"),
        default_sort="banDate", default_order="desc",
    ))
