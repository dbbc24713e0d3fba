"""
Application factory.

`create_app(settings)` is the single place where configuration turns into
objects: it picks the persistence strategy, builds the media store and token
signer, wires the services onto `app.state` and registers the routers,
middleware and exception handlers.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

import ayni
from ayni.core.config import Settings, get_settings
from ayni.core.cors import OriginGuardMiddleware, OriginPolicy
from ayni.core.errors import ServiceError, UpstreamFailure
from ayni.core.logging_setup import configure_logging
from ayni.core.security import TokenSigner
from ayni.repositories import Repository, build_repository
from ayni.routers import auth as auth_router
from ayni.routers import health as health_router
from ayni.routers import pedidos as pedidos_router
from ayni.routers import productos as productos_router
from ayni.routers import usuarios as usuarios_router
from ayni.services.media_service import LocalMediaStore, MediaStore
from ayni.services.order_service import OrderService
from ayni.services.product_service import ProductService
from ayni.services.user_service import UserService

logger = logging.getLogger(__name__)


async def _service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Solicitud inválida"}, status_code=400)


async def _unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Error interno del servidor"}, status_code=500)


def _seed_admin(users: UserService, settings: Settings) -> None:
    if not (settings.admin_email and settings.admin_password):
        return
    try:
        users.ensure_default_admin(settings.admin_email, settings.admin_password)
    except UpstreamFailure as exc:
        logger.warning("Error inicializando admin: %s", exc.message)


def create_app(
    settings: Optional[Settings] = None,
    *,
    repository: Optional[Repository] = None,
    media: Optional[MediaStore] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    repository = repository or build_repository(settings)
    repository.initialize()
    if media is None:
        media = LocalMediaStore(
            settings.media_dir,
            base_url=settings.media_base_url,
            folder=settings.media_folder,
            max_dimension=settings.media_max_dimension,
        )
    signer = TokenSigner(settings.secret_key, settings.session_ttl_seconds)
    policy = OriginPolicy(settings.cors_origins)

    app = FastAPI(title="Studio AYNI API", version=ayni.__version__)
    app.state.settings = settings
    app.state.repository = repository
    app.state.media = media
    app.state.token_signer = signer
    app.state.origin_policy = policy
    app.state.product_service = ProductService(repository, media)
    app.state.order_service = OrderService(repository, settings.default_payment_method)
    app.state.user_service = UserService(repository, signer)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(policy.exact),
        allow_origin_regex=policy.regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(OriginGuardMiddleware, policy=policy)

    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(auth_router.router)
    app.include_router(productos_router.router)
    app.include_router(pedidos_router.router)
    app.include_router(usuarios_router.router)
    app.include_router(health_router.router)

    if isinstance(media, LocalMediaStore) and media.base_url.startswith("/"):
        app.mount(media.base_url, StaticFiles(directory=str(media.root_dir)), name="media")

    _seed_admin(app.state.user_service, settings)
    logger.info(
        "Studio AYNI API ready (backend=%s, media=%s, origins=%d)",
        repository.name,
        media.describe(),
        len(policy.patterns),
    )
    return app
