import os
from datetime import timedelta


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.environ.get(name, default) or "").strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")

    MONGODB_URI = os.environ.get("MONGODB_URI")
    MONGODB_DB = os.environ.get("MONGODB_DB", "ChaiMine")

    # Single admin identity; the password may be plain or a bcrypt hash ("$2b$...").
    ADMIN_APP_USERNAME = os.environ.get("ADMIN_APP_USERNAME")
    ADMIN_APP_PASSWORD = os.environ.get("ADMIN_APP_PASSWORD")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    GEOIP_LOOKUP = _env_flag("GEOIP_LOOKUP")

    PERMANENT_SESSION_LIFETIME = timedelta(days=30)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE")
    REMEMBER_COOKIE_DURATION = timedelta(days=30)
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = "Lax"
