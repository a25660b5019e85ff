import json
from datetime import timedelta

import pytest

from loteamentos.auth.session import (
    SessionStore,
    new_session_id,
    session_key,
    sign_session,
    verify_session,
)
from loteamentos.core.models import Role, User

USER = User(
    id="u1",
    name="Ana",
    email="ana@example.com",
    password_hash="$argon2id$v=19$m=65536,t=3,p=4$c2FsdA$aGFzaA",
    role=Role.USER,
    created_at="2024-01-01T00:00:00.000Z",
)


def test_session_valid_before_expiry(store, clock):
    sessions = SessionStore(store, clock=clock)
    sessions.login(USER)
    clock.now += timedelta(hours=23, minutes=59)
    current = sessions.current_user()
    assert current is not None
    assert current.id == "u1"
    assert current.role is Role.USER


def test_session_expires_and_is_removed(store, clock):
    sessions = SessionStore(store, clock=clock)
    sessions.login(USER)
    clock.now += timedelta(hours=24, minutes=1)
    assert sessions.current_user() is None
    assert store.get(sessions.key) is None


def test_session_never_holds_password_hash(store, clock):
    sessions = SessionStore(store, clock=clock)
    sessions.login(USER)
    raw = store.get("loteamentos-session")
    assert "argon2" not in raw
    record = json.loads(raw)
    assert set(record["user"]) == {"id", "name", "email", "role"}
    assert record["expiresAt"] == "2024-01-16T10:00:00.000Z"


def test_logout_removes_record(store, clock):
    sessions = SessionStore(store, clock=clock)
    sessions.login(USER)
    sessions.logout()
    assert sessions.current_user() is None
    assert store.get(sessions.key) is None


def test_unreadable_record_is_discarded(store, clock):
    store.set("loteamentos-session", "{not json")
    sessions = SessionStore(store, clock=clock)
    assert sessions.current_user() is None
    assert store.get("loteamentos-session") is None


def test_cookie_token_round_trip(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    sid = new_session_id()
    token = sign_session(sid)
    assert verify_session(token) == sid
    assert verify_session(token + "x") is None
    assert verify_session("") is None
    assert session_key(sid) == f"loteamentos-session:{sid}"


def test_signing_requires_secret(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("LOT_SECRET_KEY", raising=False)
    with pytest.raises(RuntimeError):
        sign_session("abc")


def test_login_prunes_abandoned_sessions(store, clock):
    for _ in range(100):
        SessionStore(store, key=session_key(new_session_id()), clock=clock).login(USER)
    clock.now += timedelta(days=30)

    fresh = SessionStore(store, key=session_key(new_session_id()), clock=clock)
    fresh.login(USER)

    session_keys = [k for k in store.keys() if k.startswith("loteamentos-session")]
    assert session_keys == [fresh.key]
    assert fresh.current_user() is not None


def test_prune_keeps_live_sessions(store, clock):
    older = SessionStore(store, key=session_key("old"), clock=clock)
    older.login(USER)
    live = SessionStore(store, key=session_key("live"), clock=clock)
    clock.now += timedelta(hours=12)
    live.login(USER)
    clock.now += timedelta(hours=13)

    assert SessionStore(store, key=session_key("new"), clock=clock).prune_expired() == 1
    assert store.get(older.key) is None
    assert live.current_user() is not None
