from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

import ayni

router = APIRouter(tags=["health"])


@router.get("/api/health")
def health(request: Request):
    state = request.app.state
    database_ok = state.repository.ping()
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backend": state.repository.name,
        "database": "connected" if database_ok else "disconnected",
        "storage": state.media.describe(),
        "cors": "enabled",
        "allowedOrigins": list(state.origin_policy.patterns),
    }


@router.get("/")
def root(request: Request):
    return {
        "message": "Studio AYNI API",
        "version": ayni.__version__,
        "database": request.app.state.repository.name,
        "endpoints": {
            "health": "/api/health",
            "productos": "/api/productos",
            "pedidos": "/api/pedidos",
            "login": "/api/login",
        },
    }
