from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Request

from ayni.routers.deps import get_order_service
from ayni.services.order_service import OrderService
from ayni.services.session_service import current_user_id, require_user

router = APIRouter(prefix="/api/pedidos", tags=["pedidos"])


@router.post("")
def create_pedido(payload: dict = Body(...), orders: OrderService = Depends(get_order_service)):
    return {"success": True, "pedido": orders.create(payload)}


@router.get("", dependencies=[Depends(require_user)])
def list_pedidos(orders: OrderService = Depends(get_order_service)):
    return orders.list()


@router.patch("/{order_id}", dependencies=[Depends(require_user)])
def update_pedido(
    order_id: int,
    request: Request,
    payload: dict = Body(...),
    orders: OrderService = Depends(get_order_service),
):
    pedido = orders.update_status(order_id, payload.get("estado"), actor_id=current_user_id(request))
    return {"success": True, "pedido": pedido}
