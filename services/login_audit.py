from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import requests
from pymongo.errors import PyMongoError
from user_agents import parse as ua_parse

from errors import ValidationError

logger = logging.getLogger(__name__)

LOGIN_LOGS = "LoginLogs"


def ensure_login_log_indexes(database) -> None:
    try:
        database[LOGIN_LOGS].create_index([("username", 1), ("timestamp", -1)])
        database[LOGIN_LOGS].create_index([("ip", 1), ("timestamp", -1)])
    except PyMongoError as e:
        logger.warning("Could not create login log indexes: %s", e)


def get_location(ip: str) -> Dict[str, Any]:
    try:
        resp = requests.get(f"http://ip-api.com/json/{ip}", timeout=5).json()
        return {
            "country": resp.get("country"),
            "region": resp.get("regionName"),
            "city": resp.get("city"),
            "isp": resp.get("isp"),
        }
    except (requests.RequestException, ValueError) as e:
        logger.info("IP lookup failed for %s: %s", ip, e)
        return {}


def parse_device(user_agent: Optional[str]) -> Dict[str, Any]:
    ua = user_agent or ""
    parsed = ua_parse(ua)
    return {
        "browser": f"{parsed.browser.family} {parsed.browser.version_string}".strip(),
        "os": f"{parsed.os.family} {parsed.os.version_string}".strip(),
        "is_mobile": bool(parsed.is_mobile),
        "raw": ua,
    }


def client_ip(req) -> str:
    return req.headers.get("X-Forwarded-For", "").split(",")[0].strip() or (req.remote_addr or "")


def record_login_attempt(database, username: str, success: bool, req, lookup_location: bool = False) -> str:
    ip = client_ip(req)
    doc = {
        "username": username,
        "success": bool(success),
        "ip": ip,
        "device": parse_device(req.headers.get("User-Agent")),
        "location": get_location(ip) if (lookup_location and ip) else {},
        "timestamp": datetime.utcnow(),
    }
    res = database[LOGIN_LOGS].insert_one(doc)
    return str(res.inserted_id)


def recent_login_attempts(database, limit: int = 20, day: Optional[str] = None) -> List[Dict[str, Any]]:
    """Newest first. `day` (YYYY-MM-DD, UTC) narrows to a single day."""
    query: Dict[str, Any] = {}
    if day:
        try:
            start = datetime.strptime(day, "%Y-%m-%d")
        except ValueError:
            raise ValidationError(f"Invalid date: {day}")
        query["timestamp"] = {"$gte": start, "$lt": start + timedelta(days=1)}
    return list(database[LOGIN_LOGS].find(query).sort("timestamp", -1).limit(limit))
