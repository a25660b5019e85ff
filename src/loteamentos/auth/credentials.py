# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass, field
from typing import List

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_PH = PasswordHasher()

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

PASSWORD_MIN_LENGTH = 8


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Senha vazia")
    return _PH.hash(plain)


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False


@dataclass(frozen=True)
class PasswordCheck:
    valid: bool
    errors: List[str] = field(default_factory=list)


def validate_password(password: str) -> PasswordCheck:
    """Check the password policy, reporting every rule that fails."""
    pw = password or ""
    errors: List[str] = []
    if len(pw) < PASSWORD_MIN_LENGTH:
        errors.append(f"A senha deve ter no mínimo {PASSWORD_MIN_LENGTH} caracteres")
    if not re.search(r"[A-Z]", pw):
        errors.append("A senha deve conter pelo menos uma letra maiúscula")
    if not re.search(r"[a-z]", pw):
        errors.append("A senha deve conter pelo menos uma letra minúscula")
    if not re.search(r"\d", pw):
        errors.append("A senha deve conter pelo menos um número")
    return PasswordCheck(valid=not errors, errors=errors)


def validate_email(email: str) -> bool:
    """Loose syntactic check: something@something.something, no whitespace."""
    return _EMAIL_RE.fullmatch(email or "") is not None


def generate_id() -> str:
    """Millisecond timestamp followed by 9 random base-36 characters."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{int(time.time() * 1000)}{suffix}"
