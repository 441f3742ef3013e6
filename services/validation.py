from __future__ import annotations

import math
import re
from typing import Any, Union

from errors import ValidationError

PHONE_RE = re.compile(r"^\+?\d{10,15}$")


def normalize_phone(raw: Any) -> str:
    phone = re.sub(r"[\s\-()]", "", str(raw or ""))
    if not phone:
        raise ValidationError("Phone number is required")
    if not PHONE_RE.match(phone):
        raise ValidationError("Phone number must be 10 to 15 digits")
    return phone


def require_text(raw: Any, label: str) -> str:
    value = str(raw or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


def parse_amount(raw: Any, label: str) -> Union[int, float]:
    """Numeric input from JSON or a form field; ints stay ints."""
    if isinstance(raw, bool) or raw is None or raw == "":
        raise ValidationError(f"{label} must be a number")
    try:
        value = float(str(raw).replace(",", "").strip())
    except ValueError:
        raise ValidationError(f"{label} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a number")
    return int(value) if value.is_integer() else value


def parse_flag(raw: Any, label: str) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw if raw is not None else "").strip().lower()
    if text in ("true", "1", "yes"):
        return True
    if text in ("false", "0", "no"):
        return False
    raise ValidationError(f"{label} must be true or false")
