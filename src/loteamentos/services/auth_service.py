# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Login / registration / password flows.

Every flow validates all of its inputs before reporting, and returns the
complete list of messages in an `AuthResult` instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from loteamentos.auth.credentials import generate_id, hash_password, validate_email, validate_password
from loteamentos.auth.session import SessionStore
from loteamentos.auth.users import UserDirectory
from loteamentos.core.errors import DuplicateUserError
from loteamentos.core.models import Role, SessionUser, User
from loteamentos.core.utils import to_iso, utc_now

logger = logging.getLogger(__name__)

MSG_BAD_CREDENTIALS = "E-mail ou senha incorretos"
MSG_EMAIL_TAKEN = "Este e-mail já está cadastrado"


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    errors: List[str] = field(default_factory=list)
    user: Optional[SessionUser] = None


def _email_errors(email: str) -> List[str]:
    if not email:
        return ["E-mail é obrigatório"]
    if not validate_email(email):
        return ["Formato de e-mail inválido"]
    return []


def login(directory: UserDirectory, sessions: SessionStore, email: str, password: str) -> AuthResult:
    errors = _email_errors(email)
    if not password:
        errors.append("Senha é obrigatória")
    if errors:
        return AuthResult(ok=False, errors=errors)

    user = directory.authenticate(email, password)
    if not user:
        # same message for unknown email and wrong password
        logger.info("Login failed for %s", email)
        return AuthResult(ok=False, errors=[MSG_BAD_CREDENTIALS])

    ident = sessions.login(user)
    logger.info("Login ok for user %s", user.id)
    return AuthResult(ok=True, user=ident)


def logout(sessions: SessionStore) -> None:
    sessions.logout()


def register(
    directory: UserDirectory,
    name: str,
    email: str,
    password: str,
    confirm_password: str,
) -> AuthResult:
    errors: List[str] = []
    if not (name or "").strip():
        errors.append("Nome completo é obrigatório")
    errors.extend(_email_errors(email))
    errors.extend(validate_password(password).errors)
    if password != confirm_password:
        errors.append("As senhas não coincidem")
    if errors:
        return AuthResult(ok=False, errors=errors)

    if directory.find_by_email(email):
        return AuthResult(ok=False, errors=[MSG_EMAIL_TAKEN])

    user = User(
        id=generate_id(),
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role=Role.USER,
        created_at=to_iso(utc_now()),
    )
    try:
        directory.store(user)
    except DuplicateUserError:
        return AuthResult(ok=False, errors=[MSG_EMAIL_TAKEN])

    logger.info("Registered user %s", user.id)
    return AuthResult(ok=True, user=SessionUser.of(user))


def change_password(
    directory: UserDirectory,
    user_id: str,
    current_password: str,
    new_password: str,
    confirm_password: str,
) -> AuthResult:
    errors: List[str] = []
    if not current_password:
        errors.append("Senha atual é obrigatória")
    errors.extend(validate_password(new_password).errors)
    if new_password != confirm_password:
        errors.append("As senhas não coincidem")
    if current_password and current_password == new_password:
        errors.append("A nova senha deve ser diferente da senha atual")
    if errors:
        return AuthResult(ok=False, errors=errors)

    if not directory.verify_password(user_id, current_password):
        return AuthResult(ok=False, errors=["Senha atual incorreta"])

    if not directory.update_password(user_id, new_password):
        return AuthResult(ok=False, errors=["Erro ao atualizar senha. Tente novamente."])
    return AuthResult(ok=True)


def forgot_password(directory: UserDirectory, email: str) -> AuthResult:
    """Confirm the account exists. No message is sent: there is no mail channel."""
    errors = _email_errors(email)
    if errors:
        return AuthResult(ok=False, errors=errors)
    user = directory.find_by_email(email)
    if not user:
        return AuthResult(ok=False, errors=["E-mail não encontrado em nossa base de dados"])
    logger.info("Password recovery requested for user %s", user.id)
    return AuthResult(ok=True, user=SessionUser.of(user))
