from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from api import create_app
from api.config import parse_duration, get_config, TestingConfig, ProductionConfig, DevelopmentConfig
from models import storage
from utils.pillars import compute_score, daily_averages
from utils.rotation import next_in_rotation, rotation_status, days_since


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("15m", timedelta(minutes=15)),
        ("7d", timedelta(days=7)),
        ("12h", timedelta(hours=12)),
        ("30s", timedelta(seconds=30)),
        ("900", timedelta(seconds=900)),
    ],
)
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "m", "15w", "1.5h"])
def test_parse_duration_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_get_config():
    assert get_config("testing") is TestingConfig
    assert get_config("production") is ProductionConfig
    assert get_config("dev") is DevelopmentConfig


def test_production_requires_jwt_secret(tmp_path, monkeypatch):
    monkeypatch.setattr(ProductionConfig, "JWT_SECRET", None)
    with pytest.raises(RuntimeError, match="JWT_SECRET"):
        create_app("production", DATABASE_URL=f"sqlite:///{tmp_path / 'prod.db'}")


def test_production_accepts_configured_secret(tmp_path, monkeypatch):
    monkeypatch.setattr(ProductionConfig, "JWT_SECRET", "prod-secret-0123456789abcdef0123456789")
    app = create_app("production", DATABASE_URL=f"sqlite:///{tmp_path / 'prod.db'}")
    try:
        assert app.config["JWT_SECRET"] == "prod-secret-0123456789abcdef0123456789"
    finally:
        storage.close()


def test_compute_score():
    assert compute_score({}) == 0
    assert compute_score({"deen": True, "body": False, "mind": True}) == 2
    assert compute_score({p: True for p in ("deen", "body", "mind", "mission", "brotherhood")}) == 5
    assert compute_score({"unknown": True}) == 0


def test_daily_averages_rounds_to_one_decimal():
    rows = [SimpleNamespace(date="2024-05-01", score=s) for s in (1, 1, 2)]
    rows.append(SimpleNamespace(date="2024-05-02", score=4))
    assert daily_averages(rows) == [
        {"date": "2024-05-01", "average": 1.3, "count": 3},
        {"date": "2024-05-02", "average": 4.0, "count": 1},
    ]


def test_next_in_rotation():
    order = ["a", "b", "c"]
    assert next_in_rotation(order, "a") == "b"
    assert next_in_rotation(order, "c") == "a"
    assert next_in_rotation(order, "stranger") == "a"
    assert next_in_rotation([], "a") is None


def test_rotation_status():
    last = datetime(2024, 5, 1, 12, 0)
    rotation = SimpleNamespace(current_user_id="b", interval_days=3, last_rotated_at=last)
    early = rotation_status(rotation, "b", last + timedelta(days=2, hours=23))
    assert early["needsRotation"] is False
    assert early["isMyTurn"] is True
    due = rotation_status(rotation, "a", last + timedelta(days=3))
    assert due["needsRotation"] is True
    assert due["isMyTurn"] is False


def test_days_since_floors():
    start = datetime(2024, 5, 1)
    assert days_since(start, start + timedelta(hours=47)) == 1
