"""Error taxonomy shared by services and mapped to HTTP by the app."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors that carry a public message and an HTTP status."""

    status_code = 500
    default_message = "Error interno del servidor"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Datos inválidos"


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "No autorizado"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Recurso no encontrado"


class UpstreamFailure(ServiceError):
    """Database, file store or media store failed."""

    status_code = 502
    default_message = "Servicio externo no disponible"
