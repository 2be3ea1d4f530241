from datetime import timedelta

import pytest

from models import storage
from models.base_model import utcnow
from models.refresh_token import RefreshToken
from models.user import User
from utils.security import hash_token
from utils.token_store import issue_refresh_token, consume_refresh_token, revoke_refresh_tokens


@pytest.fixture
def user_id(app_ctx):
    user = User(email="a@x.com", handle="alice", name="A", password_hash="x")
    storage.new(user)
    storage.save()
    return user.id


def _count(user_id):
    return storage.get_session().query(RefreshToken).filter(RefreshToken.user_id == user_id).count()


def test_issue_stores_hash_only(user_id):
    record = issue_refresh_token(user_id, "raw-token-1")
    assert record.token_hash == hash_token("raw-token-1")
    session = storage.get_session()
    assert session.query(RefreshToken).filter(RefreshToken.token_hash == "raw-token-1").first() is None
    ttl = record.expires_at - utcnow()
    assert timedelta(days=6, hours=23) < ttl <= timedelta(days=7)


def test_consume_is_single_use(user_id):
    issue_refresh_token(user_id, "raw-token-1")
    first = consume_refresh_token("raw-token-1")
    assert first is not None
    assert first.user_id == user_id
    assert consume_refresh_token("raw-token-1") is None
    assert _count(user_id) == 0


def test_consume_unknown_token(user_id):
    assert consume_refresh_token("never-issued") is None


def test_consume_expired_record_is_not_found_and_cleaned_up(user_id):
    storage.new(RefreshToken(token_hash=hash_token("old"), user_id=user_id, expires_at=utcnow() - timedelta(seconds=1)))
    storage.save()
    assert consume_refresh_token("old") is None
    assert _count(user_id) == 0


def test_second_session_cannot_consume_after_first(user_id):
    issue_refresh_token(user_id, "contested")
    s1, s2 = storage.create_session(), storage.create_session()
    try:
        results = [consume_refresh_token("contested", session=s) for s in (s1, s2)]
    finally:
        s1.close()
        s2.close()
    winners = [r for r in results if r is not None]
    assert len(winners) == 1


def test_revoke_all_is_idempotent(user_id):
    issue_refresh_token(user_id, "t1")
    issue_refresh_token(user_id, "t2")
    assert revoke_refresh_tokens(user_id) == 2
    assert revoke_refresh_tokens(user_id) == 0
    assert consume_refresh_token("t1") is None
    assert consume_refresh_token("t2") is None
