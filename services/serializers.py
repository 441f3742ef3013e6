from __future__ import annotations

from datetime import date, datetime
from typing import Any

from bson import ObjectId

from errors import ValidationError


def serialize_doc(value: Any) -> Any:
    """Make a Mongo document JSON-friendly: ObjectId -> str, datetimes -> ISO (UTC)."""
    if isinstance(value, dict):
        return {k: serialize_doc(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_doc(v) for v in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.isoformat(timespec="milliseconds") + "Z"
        return value.isoformat(timespec="milliseconds")
    if isinstance(value, date):
        return value.isoformat()
    return value


def to_object_id(raw: Any) -> ObjectId:
    try:
        return ObjectId(str(raw))
    except Exception:
        raise ValidationError("Invalid id")
