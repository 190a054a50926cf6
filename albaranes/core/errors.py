"""
Taxonomía de errores de la API.

Cada servicio lanza una de estas excepciones y los manejadores registrados
en la app las convierten en una respuesta JSON homogénea:

    {"error": "<CODIGO>", "message": "<texto legible>"}

Los fallos de validación añaden "errors" con la lista de campos.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from albaranes.core.logger import logger


class AppError(Exception):
    status_code = 500
    code = "INTERNAL"
    default_message = "Error interno del servidor"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidArgument(AppError):
    status_code = 400
    code = "INVALID_ARGUMENT"
    default_message = "Argumento inválido"


class Unauthenticated(AppError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "No autenticado"


class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "No autorizado"


class NotFoundOrUnauthorized(AppError):
    # Se confunde a propósito "no existe" con "no es tuyo"
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Recurso no encontrado o no autorizado"


class Conflict(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "El recurso ya existe"


class ValidationFailed(AppError):
    status_code = 422
    code = "VALIDATION_FAILED"
    default_message = "Datos no válidos"

    def __init__(self, errors: list[dict], message: str | None = None):
        self.errors = errors
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class Internal(AppError):
    pass


# =========================
# HANDLERS
# =========================
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _field_name(loc) -> str:
    # ("body", "address", "number") -> "address.number"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    error = ValidationFailed(errors)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
