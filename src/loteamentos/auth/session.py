# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from loteamentos.core.models import SessionUser, User
from loteamentos.core.utils import parse_iso, to_iso, utc_now
from loteamentos.infra.collections_repo import SESSION_KEY
from loteamentos.infra.storage import KeyValueStore

logger = logging.getLogger(__name__)

COOKIE_NAME = os.getenv("LOT_COOKIE_NAME", "lot_session")
SESSION_TTL = timedelta(hours=24)
DEFAULT_MAX_AGE_SECONDS = int(SESSION_TTL.total_seconds())


class SessionStore:
    """One persisted session slot with an absolute expiry.

    Expiry is checked on every `current_user()` call; an expired record is
    removed at that moment. `login()` also clears every other expired or
    unreadable session record in the store.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = SESSION_KEY,
        clock: Callable[[], datetime] = utc_now,
        ttl: timedelta = SESSION_TTL,
    ) -> None:
        self._store = store
        self.key = key
        self._clock = clock
        self._ttl = ttl

    def login(self, user: User | SessionUser) -> SessionUser:
        self.prune_expired()
        ident = user if isinstance(user, SessionUser) else SessionUser.of(user)
        expires_at = self._clock() + self._ttl
        record = {"user": ident.to_dict(), "expiresAt": to_iso(expires_at)}
        self._store.set(self.key, json.dumps(record, ensure_ascii=False))
        return ident

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now

    def _live_user(self, key: str, now: datetime) -> Optional[SessionUser]:
        """The user of a live record; unreadable or expired records are removed."""
        raw = self._store.get(key)
        if not raw:
            return None
        try:
            record = json.loads(raw)
            user = SessionUser.from_dict(record["user"])
            expires_at = parse_iso(str(record.get("expiresAt") or ""))
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Discarding unreadable session record %s", key)
            self._store.remove(key)
            return None
        if expires_at is None or now >= expires_at:
            self._store.remove(key)
            return None
        return user

    def prune_expired(self) -> int:
        """Remove expired session records under any session id. Returns how many went."""
        now = self._now()
        removed = 0
        for key in self._store.keys():
            if key != SESSION_KEY and not key.startswith(SESSION_KEY + ":"):
                continue
            if key == self.key:
                continue
            if self._live_user(key, now) is None:
                removed += 1
        if removed:
            logger.info("Pruned %d expired session(s)", removed)
        return removed

    def current_user(self) -> Optional[SessionUser]:
        return self._live_user(self.key, self._now())

    def logout(self) -> None:
        self._store.remove(self.key)


# --- cookie binding ---


def _serializer() -> URLSafeTimedSerializer:
    secret = os.getenv("SECRET_KEY") or os.getenv("LOT_SECRET_KEY")
    if not secret:
        raise RuntimeError("Falta SECRET_KEY (ou LOT_SECRET_KEY) no ambiente")
    salt = os.getenv("LOT_SESSION_SALT", "loteamentos.session.v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


def session_key(sid: str) -> str:
    return f"{SESSION_KEY}:{sid}"


def sign_session(sid: str) -> str:
    return _serializer().dumps({"s": sid})


def verify_session(token: str, *, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> Optional[str]:
    """Return the session id carried by a cookie token, or None."""
    if not token:
        return None
    s = _serializer()
    try:
        data = s.loads(token, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    sid = str((data or {}).get("s") or "").strip() if isinstance(data, dict) else ""
    return sid or None
