import pytest

from app import create_app
from conftest import TEST_CONFIG
from login import bcrypt


def _login(client, username="admin", password="secret"):
    return client.post("/api/login", json={"username": username, "password": password})


def test_login_with_plain_password(client, database):
    resp = _login(client)
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}
    log = database["LoginLogs"].find_one({})
    assert log["username"] == "admin"
    assert log["success"] is True
    assert log["location"] == {}
    assert set(log["device"]) == {"browser", "os", "is_mobile", "raw"}


def test_login_with_bcrypt_hash(database):
    hashed = bcrypt.generate_password_hash("s3cret", rounds=4).decode("utf-8")
    app = create_app({**TEST_CONFIG, "ADMIN_APP_PASSWORD": hashed}, database=database)
    client = app.test_client()
    assert _login(client, password="s3cret").status_code == 200
    assert _login(client, password="secret").status_code == 401


@pytest.mark.parametrize("username,password", [("admin", "wrong"), ("root", "secret"), ("", "")])
def test_login_rejected(client, database, username, password):
    resp = _login(client, username, password)
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False
    assert database["LoginLogs"].find_one({})["success"] is False


def test_login_without_configured_credentials(database):
    app = create_app({**TEST_CONFIG, "ADMIN_APP_PASSWORD": None}, database=database)
    assert _login(app.test_client()).status_code == 500


def test_login_logs_require_a_session(client):
    assert client.get("/api/loginLogs").status_code == 401

    _login(client, password="nope")
    _login(client)
    rows = client.get("/api/loginLogs").get_json()
    assert sorted(r["success"] for r in rows) == [False, True]

    client.post("/api/logout")
    assert client.get("/api/loginLogs").status_code == 401


def test_login_logs_filtered_by_day(client):
    _login(client)
    assert client.get("/api/loginLogs?date=2001-01-01").get_json() == []
    assert client.get("/api/loginLogs?date=01/01/2001").status_code == 400
