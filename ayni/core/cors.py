"""Origin allow-list: exact origins plus wildcard-suffix patterns."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class OriginPolicy:
    """
    Decides which browser origins may talk to the API.

    Patterns are either exact origins ("https://studio-ayni.vercel.app") or
    contain a single "*" that matches one or more DNS labels
    ("https://*.vercel.app").
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = tuple(p.strip().rstrip("/") for p in patterns if p and p.strip())
        self.exact = tuple(p for p in self.patterns if "*" not in p)
        wildcards = [p for p in self.patterns if "*" in p]
        self.regex = "|".join(_wildcard_to_regex(p) for p in wildcards) or None
        self._compiled = re.compile(self.regex) if self.regex else None

    def is_allowed(self, origin: str) -> bool:
        value = (origin or "").rstrip("/")
        if value in self.exact:
            return True
        return bool(self._compiled and self._compiled.fullmatch(value))


def _wildcard_to_regex(pattern: str) -> str:
    head, _, tail = pattern.partition("*")
    return f"{re.escape(head)}[a-z0-9-]+(?:\\.[a-z0-9-]+)*{re.escape(tail)}"


class OriginGuardMiddleware(BaseHTTPMiddleware):
    """Reject requests coming from a browser origin outside the allow-list."""

    def __init__(self, app, *, policy: OriginPolicy) -> None:
        super().__init__(app)
        self._policy = policy

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")
        if origin and not self._policy.is_allowed(origin):
            logger.warning("CORS: origin not allowed: %s", origin)
            return JSONResponse({"error": "Origen no permitido"}, status_code=403)
        return await call_next(request)
