"""
Authentication and user listing use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ayni.core.errors import Unauthorized, ValidationError
from ayni.core.security import CorruptCredential, TokenSigner, hash_password, verify_password
from ayni.repositories.base import Repository

logger = logging.getLogger(__name__)

COLLECTION = "usuarios"
PUBLIC_FIELDS = ("id", "email", "username", "role", "created_at")
INVALID_CREDENTIALS = "Credenciales inválidas"


def public_view(user: Mapping[str, Any]) -> dict:
    """User as clients may see it: never includes the password hash."""
    return {field: user.get(field) for field in PUBLIC_FIELDS}


@dataclass
class LoginSuccess:
    token: str
    user: dict

    def as_response(self) -> dict:
        return {"token": self.token, "user": {k: self.user[k] for k in ("id", "email", "username", "role")}}


class UserService:
    """Handles login, session token issuing, listing and admin seeding."""

    def __init__(self, repository: Repository, signer: TokenSigner) -> None:
        self.repository = repository
        self.signer = signer

    # -------------------------------------- helpers --------------------------------------
    def _find(self, identifier: str) -> Optional[dict]:
        if "@" in identifier:
            return self.repository.find_first(COLLECTION, "email", identifier.lower())
        return self.repository.find_first(COLLECTION, "username", identifier)

    # -------------------------------------- use cases --------------------------------------
    def login(self, identifier: str | None, password: str | None) -> LoginSuccess:
        identifier = str(identifier or "").strip()
        password = str(password or "")
        if not identifier or not password:
            raise ValidationError("Usuario y contraseña son obligatorios")
        user = self._find(identifier)
        if not user:
            raise Unauthorized(INVALID_CREDENTIALS)
        try:
            valid = verify_password(password, user.get("password_hash"))
        except CorruptCredential:
            logger.error("Stored password hash for user %s is corrupt", user.get("id"))
            raise Unauthorized(INVALID_CREDENTIALS) from None
        if not valid:
            raise Unauthorized(INVALID_CREDENTIALS)
        token = self.signer.issue(user["id"])
        return LoginSuccess(token=token, user=public_view(user))

    def list(self) -> list[dict]:
        return [public_view(user) for user in self.repository.list_all(COLLECTION)]

    def create_user(self, email: str, password: str, *, username: str | None = None, role: str | None = None) -> dict:
        email = (email or "").strip().lower()
        if "@" not in email:
            raise ValidationError("Email inválido")
        if not password:
            raise ValidationError("La contraseña es obligatoria")
        if self.repository.find_first(COLLECTION, "email", email):
            raise ValidationError("El email ya está registrado")
        if username and self.repository.find_first(COLLECTION, "username", username):
            raise ValidationError("El usuario ya existe")
        user = self.repository.insert(
            COLLECTION,
            {
                "email": email,
                "username": username or None,
                "password_hash": hash_password(password),
                "role": role,
            },
        )
        return public_view(user)

    def ensure_default_admin(self, email: str, password: str) -> bool:
        """Create the administrator account when missing. Returns True if created."""
        if self.repository.find_first(COLLECTION, "email", email.strip().lower()):
            logger.info("Usuario admin ya existe")
            return False
        self.create_user(email, password, role="admin")
        logger.info("Usuario admin creado: %s", email)
        return True
