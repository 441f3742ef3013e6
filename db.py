import logging

from flask import current_app
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)

EXTENSION_KEY = "chaimine_db"


def connect(uri: str, db_name: str):
    # Connect using Server API version 1
    client = MongoClient(uri, server_api=ServerApi("1"))

    # Test the connection
    try:
        client.admin.command("ping")
        logger.info("Connected to MongoDB")
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)

    return client[db_name]


def init_db(app, database=None):
    """
    Attach the database handle to `app`. Pass `database` to use an existing
    handle (tests hand in a mongomock database here).
    """
    if database is None:
        uri = app.config.get("MONGODB_URI")
        if not uri:
            raise RuntimeError("MONGODB_URI is not configured")
        database = connect(uri, app.config.get("MONGODB_DB") or "ChaiMine")
    app.extensions[EXTENSION_KEY] = database
    return database


def get_db():
    return current_app.extensions[EXTENSION_KEY]
