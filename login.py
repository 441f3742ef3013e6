import hmac
import logging

from flask import Blueprint, current_app, jsonify, request, session
from flask_bcrypt import Bcrypt
from flask_login import LoginManager, UserMixin, login_required, login_user, logout_user

from db import get_db
from services.login_audit import ensure_login_log_indexes, recent_login_attempts, record_login_attempt
from services.serializers import serialize_doc
from services.table_state import apply_table_state

logger = logging.getLogger(__name__)

login_bp = Blueprint("login", __name__, url_prefix="/api")
bcrypt = Bcrypt()
login_manager = LoginManager()


class AdminUser(UserMixin):
    """The dashboard has exactly one operator account, configured by env."""

    def __init__(self, username):
        self.id = username
        self.username = username

    def __repr__(self):
        return f"<AdminUser {self.username}>"


@login_manager.user_loader
def load_user(user_id):
    configured = current_app.config.get("ADMIN_APP_USERNAME")
    if configured and user_id == configured:
        return AdminUser(user_id)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(success=False, message="Login required"), 401


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def password_matches(password: str, configured: str) -> bool:
    if configured.startswith("$2"):
        try:
            return bcrypt.check_password_hash(configured, password)
        except ValueError:
            logger.error("ADMIN_APP_PASSWORD looks like a bcrypt hash but is not valid")
            return False
    return _same(password, configured)


@login_bp.record_once
def on_load(state):
    bcrypt.init_app(state.app)
    login_manager.init_app(state.app)
    with state.app.app_context():
        ensure_login_log_indexes(get_db())


@login_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    username = str(data.get("username") or "").strip()
    password = str(data.get("password") or "")

    env_username = current_app.config.get("ADMIN_APP_USERNAME")
    env_password = current_app.config.get("ADMIN_APP_PASSWORD")
    if not env_username or not env_password:
        logger.error("Admin credentials are not configured")
        return jsonify(success=False, message="Server configuration error"), 500

    ok = _same(username, env_username) and password_matches(password, env_password)
    record_login_attempt(
        get_db(), username, ok, request,
        lookup_location=current_app.config.get("GEOIP_LOOKUP", False),
    )
    if not ok:
        logger.info("Rejected login for %r", username)
        return jsonify(success=False, message="Invalid credentials"), 401

    session.permanent = True
    login_user(AdminUser(env_username), remember=True)
    return jsonify(success=True)


@login_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    return jsonify(success=True)


@login_bp.route("/loginLogs", methods=["GET"])
@login_required
def login_logs():
    limit = min(max(request.args.get("limit", 50, type=int) or 50, 1), 500)
    rows = [serialize_doc(r) for r in recent_login_attempts(get_db(), limit=limit, day=request.args.get("date"))]
    return jsonify(apply_table_state(rows, request.args, search_fields=("username", "ip")))
