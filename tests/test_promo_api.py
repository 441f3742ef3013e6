import pytest
from bson import ObjectId

from errors import ValidationError
from routes.promo import validated_promo


def test_validated_promo_uppercases_code():
    assert validated_promo({"code": "  save10 ", "percentage": "10"}) == {"code": "SAVE10", "percentage": 10}


@pytest.mark.parametrize("payload", [
    {"code": "", "percentage": 10},
    {"code": "X", "percentage": 0},
    {"code": "X", "percentage": -5},
    {"code": "X", "percentage": "ten"},
    {"code": "X"},
])
def test_validated_promo_rejects_bad_input(payload):
    with pytest.raises(ValidationError):
        validated_promo(payload)


def test_promo_lifecycle(client, database):
    resp = client.post("/api/promo", json={"code": "chai20", "percentage": 20})
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["code"] == "CHAI20"
    promo_id = created["id"]

    listed = client.get("/api/promo").get_json()
    assert [p["code"] for p in listed] == ["CHAI20"]
    assert listed[0]["_id"] == promo_id

    resp = client.put(f"/api/promo?id={promo_id}", json={"code": "chai25", "percentage": 25.5})
    assert resp.status_code == 200
    stored = database["PromoCodes"].find_one({"_id": ObjectId(promo_id)})
    assert stored["code"] == "CHAI25"
    assert stored["percentage"] == 25.5

    resp = client.delete(f"/api/promo?id={promo_id}")
    assert resp.get_json() == {"id": promo_id, "deleted": True}
    assert database["PromoCodes"].count_documents({}) == 0


def test_duplicate_code_is_a_conflict(client):
    client.post("/api/promo", json={"code": "CHAI20", "percentage": 20})
    resp = client.post("/api/promo", json={"code": "chai20", "percentage": 15})
    assert resp.status_code == 409

    other = client.post("/api/promo", json={"code": "TEA5", "percentage": 5}).get_json()
    resp = client.put(f"/api/promo?id={other['id']}", json={"code": "CHAI20", "percentage": 5})
    assert resp.status_code == 409


def test_update_keeping_same_code_is_allowed(client):
    created = client.post("/api/promo", json={"code": "CHAI20", "percentage": 20}).get_json()
    resp = client.put(f"/api/promo?id={created['id']}", json={"code": "CHAI20", "percentage": 30})
    assert resp.status_code == 200


def test_promo_id_errors(client):
    assert client.delete("/api/promo").status_code == 400
    assert client.delete("/api/promo?id=not-an-id").status_code == 400
    assert client.delete(f"/api/promo?id={ObjectId()}").status_code == 404
    resp = client.put(f"/api/promo?id={ObjectId()}", json={"code": "X1", "percentage": 5})
    assert resp.status_code == 404
