import mongomock
import pytest
from pymongo.errors import OperationFailure

from app import create_app

TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test-secret",
    "ADMIN_APP_USERNAME": "admin",
    "ADMIN_APP_PASSWORD": "secret",
    "GEOIP_LOOKUP": False,
}


@pytest.fixture
def database():
    return mongomock.MongoClient()["ChaiMine"]


@pytest.fixture
def app(database):
    return create_app(TEST_CONFIG, database=database)


@pytest.fixture
def client(app):
    return app.test_client()


def order(created_at, total, status="fulfilled", **extra):
    doc = {
        "customerName": extra.pop("customerName", "Guest"),
        "phoneNumber": extra.pop("phoneNumber", "9000000000"),
        "total": total,
        "status": status,
        "createdAt": created_at,
        "items": [],
    }
    doc.update(extra)
    return doc


def expense(created_at, category, amount, comment=""):
    return {"category": category, "amount": amount, "comment": comment, "createdAt": created_at}


class FailingCollection:
    def find(self, *args, **kwargs):
        raise OperationFailure("simulated failure")

    def aggregate(self, *args, **kwargs):
        raise OperationFailure("simulated failure")


class FailingDatabase:
    """Wraps a database and breaks one collection."""

    def __init__(self, inner, failing):
        self.inner = inner
        self.failing = failing

    def __getitem__(self, name):
        if name == self.failing:
            return FailingCollection()
        return self.inner[name]
