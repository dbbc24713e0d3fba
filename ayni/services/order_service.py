"""Order (pedido) use cases."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from ayni.core.errors import NotFound, ValidationError
from ayni.repositories.base import Repository

logger = logging.getLogger(__name__)

COLLECTION = "pedidos"
INITIAL_STATUS = "pendiente"
ORDER_STATUSES = ("pendiente", "confirmado", "enviado", "entregado", "cancelado")


def parse_total(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError("El total debe ser un número no negativo")
    try:
        total = float(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("El total debe ser un número no negativo") from None
    if not math.isfinite(total) or total < 0:
        raise ValidationError("El total debe ser un número no negativo")
    return total


class OrderService:
    def __init__(self, repository: Repository, default_payment_method: str = "whatsapp") -> None:
        self.repository = repository
        self.default_payment_method = default_payment_method

    def create(self, payload: Mapping[str, Any]) -> dict:
        cliente = payload.get("cliente")
        if not cliente:
            raise ValidationError("El cliente es obligatorio")
        productos = payload.get("productos")
        if not isinstance(productos, list) or not productos:
            raise ValidationError("El pedido debe incluir productos")
        metodo_pago = str(payload.get("metodoPago") or "").strip() or self.default_payment_method
        order = self.repository.insert(
            COLLECTION,
            {
                "cliente": cliente,
                "productos": productos,
                "total": parse_total(payload.get("total")),
                "metodo_pago": metodo_pago,
                "estado": INITIAL_STATUS,
            },
        )
        logger.info("Pedido creado: %s", order["id"])
        return order

    def list(self) -> list[dict]:
        return self.repository.list_all(COLLECTION, newest_first=True)

    def update_status(self, order_id: int, estado: Any, actor_id: Optional[int] = None) -> dict:
        value = str(estado or "").strip().lower()
        if value not in ORDER_STATUSES:
            raise ValidationError(f"Estado inválido. Valores permitidos: {', '.join(ORDER_STATUSES)}")
        order = self.repository.update(COLLECTION, order_id, {"estado": value})
        if not order:
            raise NotFound("Pedido no encontrado")
        logger.info("Pedido %s -> %s (usuario=%s)", order_id, value, actor_id)
        return order
