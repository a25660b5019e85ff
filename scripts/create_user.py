#!/usr/bin/env python3
from __future__ import annotations

import os
import sys
from getpass import getpass
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from loteamentos.auth.credentials import generate_id, hash_password, validate_email, validate_password
from loteamentos.auth.users import UserDirectory
from loteamentos.core.errors import DuplicateUserError
from loteamentos.core.models import Role, User
from loteamentos.core.utils import to_iso, utc_now
from loteamentos.infra.storage import JsonFileStore

DATA_DIR = Path(os.getenv("LOT_DATA_DIR", "data")).resolve()
STORE_FILE = Path(os.getenv("LOT_STORE_FILE", str(DATA_DIR / "storage.json"))).resolve()


def main() -> None:
    directory = UserDirectory(JsonFileStore(STORE_FILE))

    name = input("Nome: ").strip()
    email = input("E-mail: ").strip().lower()
    if not validate_email(email):
        raise SystemExit("Formato de e-mail inválido")
    role = Role.parse(input("Perfil [user/admin]: ").strip().lower() or "user")
    if role is None:
        raise SystemExit("Perfil inválido")

    pw1 = getpass("Senha: ")
    pw2 = getpass("Repita a senha: ")
    if pw1 != pw2:
        raise SystemExit("As senhas não coincidem")
    check = validate_password(pw1)
    if not check.valid:
        raise SystemExit("\n".join(check.errors))

    try:
        directory.store(
            User(
                id=generate_id(),
                name=name or email,
                email=email,
                password_hash=hash_password(pw1),
                role=role,
                created_at=to_iso(utc_now()),
            )
        )
    except DuplicateUserError as e:
        raise SystemExit(str(e))
    print(f"OK -> {STORE_FILE}")


if __name__ == "__main__":
    main()
