"""Shared fixtures: a fresh app + SQLite file database per test."""
import pytest

from api import create_app
from models import storage


@pytest.fixture
def app(tmp_path):
    app = create_app("testing", DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}")
    yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def bearer():
    def _bearer(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest.fixture
def register(client):
    """Register a user over HTTP and return the response body."""
    def _register(email="a@x.com", password="password1", name="A", handle="alice", **extra):
        body = {"email": email, "password": password, "name": name, "handle": handle, **extra}
        resp = client.post("/auth/register", json=body)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _register


@pytest.fixture
def circle_with_members(client, register, bearer):
    """
    A circle owned by alice, joined by bob then carol (plain members),
    plus dave who is registered but not a member.
    """
    users = {
        "alice": register(email="alice@x.com", name="Alice", handle="alice"),
        "bob": register(email="bob@x.com", name="Bob", handle="bob"),
        "carol": register(email="carol@x.com", name="Carol", handle="carol"),
        "dave": register(email="dave@x.com", name="Dave", handle="dave"),
    }
    resp = client.post("/circles", json={"name": "Fajr crew"}, headers=bearer(users["alice"]["accessToken"]))
    assert resp.status_code == 201
    circle = resp.get_json()["circle"]
    for name in ("bob", "carol"):
        resp = client.post(
            "/circles/join",
            json={"inviteCode": circle["inviteCode"]},
            headers=bearer(users[name]["accessToken"]),
        )
        assert resp.status_code == 201
    headers = {name: bearer(u["accessToken"]) for name, u in users.items()}
    ids = {name: u["user"]["id"] for name, u in users.items()}
    return {"circle": circle, "headers": headers, "ids": ids, "users": users}
