import json
from urllib.parse import unquote

from api.members.members_service import MEMBERS_COLLECTION


def _member(db):
    db.collection(MEMBERS_COLLECTION).document("m1").set({
        "id": "m1", "name": "Asha", "username": "asha", "password": "asha@1234", "role": "admin",
    })


def test_login_sets_cookie(client, db):
    _member(db)

    response = client.post("/api/auth/login", json={"username": "ASHA", "password": "asha@1234"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert "password" not in body["user"]
    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith("code404-user=")
    assert "SameSite=Lax" in cookie
    value = cookie.split(";")[0].split("=", 1)[1]
    assert json.loads(unquote(value))["role"] == "admin"


def test_login_wrong_password(client, db):
    _member(db)
    response = client.post("/api/auth/login", json={"username": "asha", "password": "nope"})
    assert response.status_code == 401


def test_login_missing_fields(client):
    assert client.post("/api/auth/login", json={"username": "asha"}).status_code == 400


def test_cookie_unlocks_admin_routes(client, db):
    _member(db)
    assert client.get("/api/pending-members").status_code == 401

    client.post("/api/auth/login", json={"username": "asha", "password": "asha@1234"})

    assert client.get("/api/pending-members").status_code == 200


def test_logout_clears_cookie(client):
    response = client.post("/api/auth/logout")
    assert "code404-user=;" in response.headers["Set-Cookie"]
