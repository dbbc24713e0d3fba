"""Session helpers (bearer token extraction and validation)."""
from __future__ import annotations

from fastapi import Request

from ayni.core.errors import Unauthorized
from ayni.core.security import InvalidToken, TokenSigner

AUTH_HEADER_NAME = "authorization"


def bearer_token(request: Request) -> str | None:
    """Return the token from `Authorization: Bearer <token>`, if any."""
    header = request.headers.get(AUTH_HEADER_NAME) or ""
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def _token_signer(request: Request) -> TokenSigner:
    signer = getattr(getattr(request.app, "state", None), "token_signer", None)
    if not signer:
        raise RuntimeError("TokenSigner not configured")
    return signer


def require_user(request: Request) -> int:
    """
    Dependency guarding protected routes.

    Binds the authenticated user id to `request.state.user_id`. Malformed,
    tampered and expired tokens get the same answer.
    """
    token = bearer_token(request)
    if not token:
        raise Unauthorized("No autorizado")
    try:
        user_id = _token_signer(request).verify(token)
    except InvalidToken:
        raise Unauthorized("Token inválido") from None
    request.state.user_id = user_id
    return user_id


def current_user_id(request: Request) -> int | None:
    """Return the user id bound by `require_user`, if the route was protected."""
    return getattr(request.state, "user_id", None)
