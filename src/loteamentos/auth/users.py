# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from loteamentos.auth.credentials import generate_id, hash_password, verify_password
from loteamentos.core.errors import DuplicateUserError
from loteamentos.core.models import Role, User
from loteamentos.core.utils import canon, to_iso, utc_now
from loteamentos.infra.collections_repo import read_users, write_users
from loteamentos.infra.storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_SEED_PASSWORD = os.getenv("LOT_SEED_PASSWORD", "Expandh@123")
SEED_USERS_PATH = os.getenv("LOT_SEED_USERS_PATH", "")

DEFAULT_SEED_ACCOUNTS: List[Dict[str, str]] = [
    {"name": "TI Expandh", "email": "ti@expandhurbanismo.com.br", "role": "admin"},
    {"name": "Jorge Pereira", "email": "jorgepereira@expandhurbanismo.com.br", "role": "admin"},
    {"name": "M. Puntel", "email": "mpuntel@expandhurbanismo.com.br", "role": "admin"},
]


def load_seed_accounts(path: Optional[Path] = None) -> List[Dict[str, str]]:
    """Seed account list from a YAML file (`users:` list), else the built-in admins.

    Entries without an email are skipped; a repeated email keeps its first entry.
    """
    p = path or (Path(SEED_USERS_PATH) if SEED_USERS_PATH else None)
    if p is None or not p.exists():
        return [dict(a) for a in DEFAULT_SEED_ACCOUNTS]

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    entries = (raw.get("users") or []) if isinstance(raw, dict) else []
    out: List[Dict[str, str]] = []
    seen = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        email = str(entry.get("email") or "").strip()
        if not email or canon(email) in seen:
            continue
        seen.add(canon(email))
        out.append(
            {
                "name": str(entry.get("name") or email).strip(),
                "email": email,
                "role": str(entry.get("role") or "admin").strip().lower(),
            }
        )
    return out


class UserDirectory:
    """Accounts persisted as one JSON list in the store."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def all(self) -> List[User]:
        return read_users(self._store)

    def find_by_email(self, email: str) -> Optional[User]:
        target = canon(email)
        if not target:
            return None
        for u in self.all():
            if canon(u.email) == target:
                return u
        return None

    def find_by_id(self, user_id: str) -> Optional[User]:
        for u in self.all():
            if u.id == user_id:
                return u
        return None

    def store(self, user: User) -> User:
        """Append a user; the email (case-insensitive) and id must be new."""
        users = self.all()
        target = canon(user.email)
        for u in users:
            if canon(u.email) == target:
                raise DuplicateUserError(f"Este e-mail já está cadastrado: {user.email}")
            if u.id == user.id:
                raise DuplicateUserError(f"Identificador de usuário duplicado: {user.id}")
        users.append(user)
        write_users(self._store, users)
        return user

    def seed_defaults(self, *, password: Optional[str] = None, accounts: Optional[List[Dict[str, str]]] = None) -> int:
        """Create the default admin accounts when the directory is empty.

        Returns how many accounts were created (0 if the directory already had users).
        """
        if self.all():
            return 0

        seed = accounts if accounts is not None else load_seed_accounts()
        hashed = hash_password(password or DEFAULT_SEED_PASSWORD)
        created = 0
        seen = set()
        for entry in seed:
            if canon(entry["email"]) in seen:
                logger.warning("Skipping repeated seed account %s", entry["email"])
                continue
            seen.add(canon(entry["email"]))
            now = to_iso(utc_now())
            self.store(
                User(
                    id=generate_id(),
                    name=entry["name"],
                    email=entry["email"],
                    password_hash=hashed,
                    role=Role.parse(entry.get("role")) or Role.ADMIN,
                    created_at=now,
                )
            )
            created += 1
        logger.info("Seeded %d default account(s)", created)
        return created

    def update_password(self, user_id: str, new_password: str) -> bool:
        users = self.all()
        for idx, u in enumerate(users):
            if u.id == user_id:
                users[idx] = replace(u, password_hash=hash_password(new_password))
                write_users(self._store, users)
                logger.info("Password updated for user %s", user_id)
                return True
        return False

    def verify_password(self, user_id: str, candidate: str) -> bool:
        u = self.find_by_id(user_id)
        if not u:
            return False
        return verify_password(u.password_hash, candidate)

    def authenticate(self, email: str, password: str) -> Optional[User]:
        u = self.find_by_email(email)
        if not u:
            return None
        if not verify_password(u.password_hash, password):
            return None
        return u
