"""Accessors for the services wired onto `app.state` by `create_app`."""
from __future__ import annotations

from fastapi import Request

from ayni.services.order_service import OrderService
from ayni.services.product_service import ProductService
from ayni.services.user_service import UserService


def _state(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if not svc:
        raise RuntimeError(f"{name} not configured")
    return svc


def get_product_service(request: Request) -> ProductService:
    return _state(request, "product_service")


def get_order_service(request: Request) -> OrderService:
    return _state(request, "order_service")


def get_user_service(request: Request) -> UserService:
    return _state(request, "user_service")
