import threading
from datetime import timedelta

from models import storage
from models.user import User
from utils.security import TokenPayload, sign_access_token


def test_register_then_login(client, register, bearer):
    reg = register(email="a@x.com", password="password1", name="A", handle="alice")
    assert reg["user"]["email"] == "a@x.com"
    assert reg["accessToken"] and reg["refreshToken"]

    resp = client.post("/auth/login", json={"email": "a@x.com", "password": "password1"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["user"] == reg["user"]

    me = client.get("/auth/me", headers=bearer(body["accessToken"]))
    assert me.status_code == 200
    assert me.get_json()["user"]["handle"] == "alice"


def test_email_is_normalized(client, register):
    register(email="  Mixed@X.com ")
    resp = client.post("/auth/login", json={"email": "mixed@x.com", "password": "password1"})
    assert resp.status_code == 200


def test_login_wrong_password(client, register):
    register()
    resp = client.post("/auth/login", json={"email": "a@x.com", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid email or password"}


def test_login_unknown_email_looks_the_same(client):
    resp = client.post("/auth/login", json={"email": "nobody@x.com", "password": "password1"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid email or password"}


def test_register_duplicate_email_and_handle(client, register):
    register()
    resp = client.post(
        "/auth/register",
        json={"email": "a@x.com", "password": "password1", "name": "B", "handle": "bob"},
    )
    assert resp.status_code == 409
    assert resp.get_json() == {"error": "Email already registered"}

    resp = client.post(
        "/auth/register",
        json={"email": "b@x.com", "password": "password1", "name": "B", "handle": "alice"},
    )
    assert resp.status_code == 409
    assert resp.get_json() == {"error": "Handle already taken"}


def test_register_validation_details(client):
    resp = client.post(
        "/auth/register",
        json={"email": "not-an-email", "password": "short", "name": "", "handle": "no spaces!"},
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Validation error"
    fields = {d["field"] for d in body["details"]}
    assert {"email", "password", "name", "handle"} <= fields


def test_register_empty_body(client):
    resp = client.post("/auth/register", data="garbage", content_type="application/json")
    assert resp.status_code == 400
    assert "details" in resp.get_json()


def test_refresh_replay_is_rejected(client, register):
    reg = register()
    first = client.post("/auth/refresh", json={"refreshToken": reg["refreshToken"]})
    assert first.status_code == 200
    assert set(first.get_json()) == {"accessToken", "refreshToken"}

    second = client.post("/auth/refresh", json={"refreshToken": reg["refreshToken"]})
    assert second.status_code == 401
    assert second.get_json() == {"error": "Invalid or expired refresh token"}


def test_refresh_requires_token(client):
    resp = client.post("/auth/refresh", json={})
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "refreshToken"


def test_logout_kills_refresh_but_not_access(client, register, bearer):
    reg = register()
    resp = client.post("/auth/logout", headers=bearer(reg["accessToken"]))
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Logged out"}

    resp = client.post("/auth/refresh", json={"refreshToken": reg["refreshToken"]})
    assert resp.status_code == 401
    # access tokens run until they expire
    assert client.get("/auth/me", headers=bearer(reg["accessToken"])).status_code == 200


def test_logout_requires_bearer(client):
    resp = client.post("/auth/logout")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Missing or invalid Authorization header"}


def test_expired_and_invalid_tokens_are_indistinguishable(app, client, register, bearer):
    reg = register()
    with app.app_context():
        expired = sign_access_token(
            TokenPayload(user_id=reg["user"]["id"], email="a@x.com"), expires_delta=timedelta(seconds=-5)
        )
    expired_resp = client.get("/auth/me", headers=bearer(expired))
    garbage_resp = client.get("/auth/me", headers=bearer("garbage"))
    assert expired_resp.status_code == garbage_resp.status_code == 401
    assert expired_resp.get_json() == garbage_resp.get_json() == {"error": "Invalid or expired token"}


def test_refresh_token_is_not_an_access_token(client, register, bearer):
    reg = register()
    resp = client.get("/auth/me", headers=bearer(reg["refreshToken"]))
    assert resp.status_code == 401


def test_malformed_authorization_header(client, register):
    reg = register()
    resp = client.get("/auth/me", headers={"Authorization": f"Token {reg['accessToken']}"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Missing or invalid Authorization header"}


def test_me_for_deleted_user(app, client, register, bearer):
    reg = register()
    with app.app_context():
        user = storage.get(User, reg["user"]["id"])
        storage.delete(user)
        storage.save()
    resp = client.get("/auth/me", headers=bearer(reg["accessToken"]))
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "User not found"}


def test_corrupt_password_hash_is_an_internal_error(app, client, register):
    reg = register()
    with app.app_context():
        user = storage.get(User, reg["user"]["id"])
        user.password_hash = "corrupted"
        storage.save()
    resp = client.post("/auth/login", json={"email": "a@x.com", "password": "password1"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}



def test_concurrent_refresh_has_exactly_one_winner(app, register):
    reg = register()
    workers = 8
    barrier = threading.Barrier(workers)
    statuses = []
    lock = threading.Lock()

    def exchange():
        client = app.test_client()
        barrier.wait()
        resp = client.post("/auth/refresh", json={"refreshToken": reg["refreshToken"]})
        with lock:
            statuses.append(resp.status_code)

    threads = [threading.Thread(target=exchange) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(statuses) == workers
    assert statuses.count(200) == 1
    assert statuses.count(401) == workers - 1
