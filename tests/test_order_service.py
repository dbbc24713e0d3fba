from __future__ import annotations

import pytest

from ayni.core.errors import NotFound, ValidationError
from ayni.services.order_service import ORDER_STATUSES, OrderService

PAYLOAD = {
    "cliente": {"nombre": "Ana", "telefono": "+51 999 999 999"},
    "productos": [{"id": 1, "nombre": "Vaso", "cantidad": 2, "precio": 25.5}],
    "total": 51,
}


@pytest.fixture()
def orders(repository):
    return OrderService(repository, default_payment_method="whatsapp")


def test_create_defaults_payment_method_and_status(orders):
    pedido = orders.create({**PAYLOAD, "estado": "entregado"})

    assert pedido["metodo_pago"] == "whatsapp"
    assert pedido["estado"] == "pendiente"
    assert pedido["total"] == 51.0
    assert pedido["cliente"]["nombre"] == "Ana"


def test_create_uses_configured_fallback(repository):
    pedido = OrderService(repository, default_payment_method="transferencia").create(PAYLOAD)

    assert pedido["metodo_pago"] == "transferencia"


def test_create_keeps_explicit_payment_method(orders):
    assert orders.create({**PAYLOAD, "metodoPago": "yape"})["metodo_pago"] == "yape"


@pytest.mark.parametrize(
    "override",
    [
        {"cliente": None},
        {"productos": []},
        {"productos": "Vaso"},
        {"total": "-3"},
        {"total": "gratis"},
        {"total": None},
    ],
)
def test_create_rejects_invalid_payload(orders, repository, override):
    with pytest.raises(ValidationError):
        orders.create({**PAYLOAD, **override})
    assert repository.list_all("pedidos") == []


def test_update_status(orders):
    pedido = orders.create(PAYLOAD)

    updated = orders.update_status(pedido["id"], "Enviado")

    assert updated["estado"] == "enviado"
    assert updated["updated_at"]
    assert updated["total"] == pedido["total"]


def test_update_status_rejects_unknown_state(orders):
    pedido = orders.create(PAYLOAD)

    with pytest.raises(ValidationError):
        orders.update_status(pedido["id"], "perdido")
    assert orders.list()[0]["estado"] == "pendiente"


def test_update_status_missing_order(orders, repository):
    with pytest.raises(NotFound) as excinfo:
        orders.update_status(999999, "confirmado")
    assert excinfo.value.message == "Pedido no encontrado"
    assert repository.list_all("pedidos") == []


def test_closed_status_set():
    assert ORDER_STATUSES[0] == "pendiente"
    assert len(set(ORDER_STATUSES)) == len(ORDER_STATUSES)
