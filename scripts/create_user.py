#!/usr/bin/env python3
"""
Provision a user in the configured backend (SQL or JSON).

Uso:
  python scripts/create_user.py --email ana@ayni.com --password secreta [--username ana] [--role admin]
"""
from __future__ import annotations

import argparse
import sys

from ayni.core.config import get_settings
from ayni.core.errors import ServiceError
from ayni.core.security import TokenSigner
from ayni.repositories import build_repository
from ayni.services.user_service import UserService


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Crear usuario del panel")
    ap.add_argument("--email", required=True, help="Email del usuario")
    ap.add_argument("--password", required=True, help="Contraseña en texto plano (se guarda el hash)")
    ap.add_argument("--username", help="Nombre de usuario opcional para el login")
    ap.add_argument("--role", default=None, help="Rol (ej.: admin)")
    args = ap.parse_args(argv)

    settings = get_settings()
    repo = build_repository(settings)
    repo.initialize()
    users = UserService(repo, TokenSigner(settings.secret_key, settings.session_ttl_seconds))
    try:
        user = users.create_user(args.email, args.password, username=args.username, role=args.role)
    except ServiceError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        return 1
    print("OK: usuario creado")
    print(f"  ID: {user['id']}")
    print(f"  Email: {user['email']}")
    if user.get("username"):
        print(f"  Usuario: {user['username']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
