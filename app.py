import logging
from datetime import datetime

from flask import Flask, jsonify, request
from pymongo.errors import PyMongoError

from config import Config
from db import init_db
from errors import ApiError
from services.date_windows import IST

# ---------------- Blueprints ----------------
from login import login_bp
from routes.reports_insights import reports_insights_bp
from routes.records import records_bp
from routes.promo import promo_bp
from routes.ban import ban_bp
from routes.user_data import user_data_bp
from routes.cash_balance import cash_balance_bp

logger = logging.getLogger(__name__)


def create_app(config_overrides=None, database=None):
    """
    Build the dashboard API. `database` replaces the Mongo connection built from
    MONGODB_URI; every handler reaches it through db.get_db().
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    # Must run before blueprints register: their on-load hooks build indexes.
    init_db(app, database)

    app.register_blueprint(login_bp)
    app.register_blueprint(reports_insights_bp)
    app.register_blueprint(records_bp)
    app.register_blueprint(promo_bp)
    app.register_blueprint(ban_bp)
    app.register_blueprint(user_data_bp)
    app.register_blueprint(cash_balance_bp)

    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return jsonify(error=err.message), err.status_code

    @app.errorhandler(PyMongoError)
    def handle_db_error(err):
        logger.error("Database error on %s %s", request.method, request.path, exc_info=err)
        return jsonify(error="Database error, please try again"), 500

    @app.route("/api/time")
    def server_time():
        now = datetime.now(IST)
        return jsonify(
            time=datetime.utcnow().isoformat(timespec="seconds") + "Z",
            timeIST=now.strftime("%d/%m/%Y, %I:%M:%S %p"),
        )

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
