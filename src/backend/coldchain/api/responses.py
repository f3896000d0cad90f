"""Response envelope and exception handlers shared by all routes.

Successful JSON responses are wrapped as ``{"success": true, "data": ...}``;
failures as ``{"success": false, "error": ..., "details": ...}``.
"""

from typing import Any, Generic, TypeVar

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from coldchain.core.config import Settings, get_settings
from coldchain.services.errors import (
    EmptyReportWindow,
    MissingRequiredIdentifier,
    UpstreamReadFailure,
)

logger = structlog.get_logger()

DataT = TypeVar("DataT")

INVALID_INPUT = "Dados de entrada inválidos"
STORE_ERROR = "Erro ao processar requisição no banco de dados"
INTERNAL_ERROR = "Erro interno do servidor"


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope."""

    success: bool = True
    message: str | None = None
    data: DataT | None = None


def current_settings(request: Request) -> Settings:
    """Settings as the route dependencies see them, overrides included."""
    provider = request.app.dependency_overrides.get(get_settings, get_settings)
    return provider()


def error_response(
    status_code: int,
    error: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        logger.warning("Route not found", method=request.method, path=request.url.path)
        return error_response(exc.status_code, "Rota não encontrada")
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": str(error.get("msg")),
        }
        for error in exc.errors()
    ]
    logger.warning("Validation error", path=request.url.path, errors=errors)
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, INVALID_INPUT, errors)


async def missing_identifier_handler(request: Request, exc: MissingRequiredIdentifier) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def empty_report_handler(request: Request, exc: EmptyReportWindow) -> JSONResponse:
    logger.info("Report window is empty", device_id=exc.device_id)
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


async def upstream_failure_handler(request: Request, exc: UpstreamReadFailure) -> JSONResponse:
    logger.error(
        "Request aborted by store failure",
        method=request.method,
        path=request.url.path,
        read=exc.read,
    )
    details = exc.message if current_settings(request).environment == "development" else None
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, STORE_ERROR, details)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    details = str(exc) if current_settings(request).environment == "development" else None
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, details)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(MissingRequiredIdentifier, missing_identifier_handler)
    app.add_exception_handler(EmptyReportWindow, empty_report_handler)
    app.add_exception_handler(UpstreamReadFailure, upstream_failure_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
