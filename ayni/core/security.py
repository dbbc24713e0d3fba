"""Security helpers (password hashing and session tokens)."""

from __future__ import annotations

from argon2 import PasswordHasher, exceptions as argon_exc
from itsdangerous import BadData, URLSafeTimedSerializer

_ph = PasswordHasher()
_PREFIX = "argon2$"
_TOKEN_SALT = "ayni-session"


class CorruptCredential(Exception):
    """Stored password hash cannot be parsed."""


class InvalidToken(Exception):
    """Session token is malformed, tampered with or expired."""


def hash_password(password: str) -> str:
    """Create an Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        raise CorruptCredential("Unsupported password hash format")
    hashed = stored[len(_PREFIX) :]
    try:
        return _ph.verify(hashed, password)
    except argon_exc.VerifyMismatchError:
        return False
    except argon_exc.InvalidHashError as exc:
        raise CorruptCredential("Malformed password hash") from exc
    except argon_exc.VerificationError:
        return False


class TokenSigner:
    """Issues and checks stateless signed session tokens bound to a user id."""

    def __init__(self, secret_key: str, ttl_seconds: int) -> None:
        if not secret_key:
            raise ValueError("secret_key is required")
        self.ttl_seconds = max(1, int(ttl_seconds))
        self._serializer = URLSafeTimedSerializer(secret_key, salt=_TOKEN_SALT)

    def issue(self, user_id: int) -> str:
        return self._serializer.dumps({"uid": user_id})

    def verify(self, token: str) -> int:
        try:
            payload = self._serializer.loads(token, max_age=self.ttl_seconds)
        except BadData as exc:
            raise InvalidToken(str(exc)) from exc
        if not isinstance(payload, dict) or "uid" not in payload:
            raise InvalidToken("Token payload without user id")
        return payload["uid"]
