from __future__ import annotations

from fastapi import APIRouter, Depends

from ayni.routers.deps import get_user_service
from ayni.services.session_service import require_user
from ayni.services.user_service import UserService

router = APIRouter(prefix="/api/usuarios", tags=["usuarios"])


@router.get("", dependencies=[Depends(require_user)])
def list_usuarios(users: UserService = Depends(get_user_service)):
    return users.list()
