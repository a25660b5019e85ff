# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from typing import Optional

from fastapi import HTTPException, Request

from loteamentos.auth.session import COOKIE_NAME, SessionStore, session_key, verify_session
from loteamentos.auth.users import UserDirectory
from loteamentos.core.models import Role, SessionUser
from loteamentos.infra.storage import KeyValueStore

ROLE_ORDER = {Role.USER: 0, Role.ADMIN: 1}


def _rank(role: Role | str) -> int:
    r = Role.parse(role) if not isinstance(role, Role) else role
    return ROLE_ORDER.get(r or Role.USER, 0)


def request_store(request: Request) -> KeyValueStore:
    return request.app.state.store


def session_for_request(request: Request) -> Optional[SessionStore]:
    """The session slot named by the signed cookie, or None without a valid cookie."""
    sid = verify_session(request.cookies.get(COOKIE_NAME, ""))
    if not sid:
        return None
    return SessionStore(request_store(request), key=session_key(sid))


def load_user_from_request(request: Request) -> Optional[SessionUser]:
    sessions = session_for_request(request)
    if sessions is None:
        return None
    ident = sessions.current_user()
    if ident is None:
        return None
    # name / role come from the directory, the session only names the account
    u = UserDirectory(request_store(request)).find_by_id(ident.id)
    if not u:
        sessions.logout()
        return None
    return SessionUser.of(u)


def current_user_optional(request: Request) -> Optional[SessionUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    return load_user_from_request(request)


def require_user(request: Request) -> SessionUser:
    u = current_user_optional(request)
    if u:
        return u
    raise HTTPException(status_code=401, detail="Não autenticado")


def require_role(min_role: str):
    def _dep(request: Request) -> SessionUser:
        u = require_user(request)
        if _rank(u.role) < _rank(min_role):
            raise HTTPException(status_code=403, detail="Acesso negado")
        return u

    return _dep


def cookie_settings() -> dict:
    secure = os.getenv("LOT_COOKIE_SECURE", "false").lower() in {"1", "true", "yes", "y"}
    return {"httponly": True, "samesite": "lax", "secure": secure}
