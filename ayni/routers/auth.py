from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ayni.routers.deps import get_user_service
from ayni.services.session_service import require_user
from ayni.services.user_service import UserService

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login")
def login(payload: dict = Body(...), users: UserService = Depends(get_user_service)):
    identifier = payload.get("username") or payload.get("email")
    result = users.login(identifier, payload.get("password"))
    return result.as_response()


@router.get("/verify")
def verify(user_id: int = Depends(require_user)):
    return {"valid": True}
